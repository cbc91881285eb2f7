"""
Shared fixtures for log-digitizer tests.

Provides a plot rectangle, documents with and without background images, and
an editor wired to them.
"""
import sys
import os
import pytest

# Ensure the repo root is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from log_digitizer import document as ops
from log_digitizer.calibration import Rect
from log_digitizer.editor import DigitizerEditor
from log_digitizer.image_utils import DecodedImage


# ── Geometry ────────────────────────────────────────────────────────────
# Plot area 400 x 300 px at (50, 20). With the default axes
# (x 10..1e6 log, y 1e-4..1e6 log) x=1000 sits at px 210 and y=1 at py 200.

PLOT = Rect(50.0, 20.0, 400.0, 300.0)


@pytest.fixture
def plot_rect():
    return PLOT


@pytest.fixture
def doc():
    return ops.default_document()


@pytest.fixture
def image():
    """Decoded image matching the plot size; no bitmap needed for geometry."""
    return DecodedImage(width=400, height=300)


@pytest.fixture
def doc_with_image(doc, image):
    return ops.set_background(doc, 0, image)


@pytest.fixture
def editor(doc):
    return DigitizerEditor(PLOT, doc)


@pytest.fixture
def bg_editor(doc_with_image):
    ed = DigitizerEditor(PLOT, doc_with_image)
    ed.bg_edit_mode = True
    return ed
