"""
High-level API of psd_run.

- :py:mod:`psd_run.api.layers`: Layer tree nodes
- :py:mod:`psd_run.api.document`: Document, the root of a layer tree
- :py:mod:`psd_run.api.handles`: Handle table of resident documents
- :py:mod:`psd_run.api.session`: Raising call surface over the table
- :py:mod:`psd_run.api.psd_loader`: Layer tree construction from PSD files
"""
