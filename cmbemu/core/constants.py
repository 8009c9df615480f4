"""
Physical and display constants for the emulator.

The emulator outputs dimensionless spectra; the factors below convert them to
the units conventionally plotted.
"""

# ============================================================================
# Physical Constants
# ============================================================================

# CMB monopole temperature
T_CMB_K = 2.7255  # K
T_CMB_MUK = T_CMB_K * 1e6  # muK

# Dimensionless C_l -> muK^2
TEMPERATURE_SCALE = T_CMB_MUK**2

# Lensing potential: C_l^pp -> l(l+1) C_l^pp * 1e7
LENSING_SCALE = 1e7

# ============================================================================
# Model Package Format
# ============================================================================

# Local file header signature of a zip archive
ARCHIVE_MAGIC = bytes([0x50, 0x4B, 0x03, 0x04])

MODEL_ENTRY = "model.tflite"
INPUT_MANIFEST = "input_names.txt"
COORDINATE_MANIFEST = "x_values.txt"
INDEX_MANIFEST = "output_indices.txt"
BEST_FIT_MANIFEST = "best_fit.txt"

# Checked in this order by the archive validator
REQUIRED_ENTRIES = (MODEL_ENTRY, COORDINATE_MANIFEST, INDEX_MANIFEST, INPUT_MANIFEST)

# Fields are written as "a, b, c"; surrounding blanks are stripped
MANIFEST_DELIMITER = ","
ASSET_SUFFIX = ".svg"
DERIVED_PREFIX = "derived"

# Coordinate group shared by every spectrum type
MULTIPOLE_GROUP = "Cl"

LENSING_LABEL = "PP"
DEFAULT_SPECTRUM = "TT"

# ============================================================================
# Multipole Axis
# ============================================================================

LOG_SCALE_BOUND = 200.0
TRANSITION_FRACTION = 0.3
MIN_COORDINATE = 2.0
MAX_COORDINATE = 2500.0

LINEAR_MAJOR_STEP = 500
LINEAR_MINOR_STEP = 100

# (min, max, tick stride) of the value axis per spectrum
Y_AXIS_LIMITS = {
    "TT": (0.0, 7000.0, 2000.0),
    "TE": (-230.0, 230.0, 100.0),
    "EE": (-2.0, 60.0, 20.0),
    "PP": (0.0, 2.5, 0.5),
}
DEFAULT_Y_AXIS_LIMITS = (0.0, 1.0, 1.0)
