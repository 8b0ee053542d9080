"""
psd-run: render layered PSD documents with runtime visibility and text
overrides.

Basic usage::

    from psd_run import Session

    with Session() as session:
        result = session.load_document(open('example.psd', 'rb').read())
        image = session.render(result.handle, hidden=[12])
        image.topil().save('output.png')

Architecture:

- :py:mod:`psd_run.api`: Layer tree, documents, handles and the session
- :py:mod:`psd_run.composite`: Layer rendering and blending engine
- :py:mod:`psd_run.host`: Dict-returning bridge for host bindings
"""

from psd_run.api.document import Document
from psd_run.api.session import Session
from psd_run.version import __version__

__all__ = ["Document", "Session", "__version__"]
