"""
Composite module for layer rendering and blending.

This subpackage renders a layer tree into a raster image. Key modules:

- :py:mod:`psd_run.composite.bounds`: Visible extent of a layer subtree
- :py:mod:`psd_run.composite.mask`: Transparency and layer mask application
- :py:mod:`psd_run.composite.composite`: Recursive group compositing
- :py:mod:`psd_run.composite.blend`: Blend mode implementations

Example usage::

    from psd_run.composite import composite_pil

    image = composite_pil(document)
    image.save('output.png')

    # Hide layer 3 for this render only
    image = composite_pil(document, layer_filter=make_layer_filter(hidden=[3]))

Groups with the pass-through blend mode are flattened into their parent;
other groups are composited on their own surface first and then blended
into the parent as a single layer.
"""

from psd_run.composite.bounds import compute_bounds, is_visible, make_layer_filter
from psd_run.composite.composite import (
    CompositeContext,
    Surface,
    composite,
    composite_pil,
    isolate,
    to_rgba8,
)
from psd_run.composite.mask import apply_masks

__all__ = [
    "CompositeContext",
    "Surface",
    "apply_masks",
    "composite",
    "composite_pil",
    "compute_bounds",
    "isolate",
    "is_visible",
    "make_layer_filter",
    "to_rgba8",
]
