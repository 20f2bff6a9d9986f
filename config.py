"""Central configuration for histogram thresholding.

All tunable parameters are defined here with descriptive names.
These values are the defaults picked up by ThresholdConfig and the CLI.
"""

# =============================================================================
# GRAYSCALE CONVERSION
# =============================================================================

# Luminance weights (ITU-R BT.709) expressed in ten-thousandths so the
# weighted sum can be computed exactly in integer arithmetic.
LUMA_WEIGHT_RED = 2126
LUMA_WEIGHT_GREEN = 7152
LUMA_WEIGHT_BLUE = 722
LUMA_WEIGHT_SCALE = 10000

# Number of gray / channel levels for 8-bit images
LEVELS = 256
MAX_LEVEL = LEVELS - 1

# =============================================================================
# MANUAL THRESHOLD
# =============================================================================

# Default inclusive range for the manual threshold (pixels with any channel
# inside the range become white)
DEFAULT_THRESHOLD_LOW = 128
DEFAULT_THRESHOLD_HIGH = MAX_LEVEL

# =============================================================================
# AUTOMATIC SELECTION
# =============================================================================

# Default selection method when none is given
DEFAULT_METHOD = "entropy"

# Fraction of pixels that should end up below the cutoff for percent-black
DEFAULT_PERCENT_BLACK = 0.5

# Mean-iterative stops once the mean moves by no more than this
MEAN_ITERATIVE_TOLERANCE = 0.01

# Safety cap on mean-iterative rounds (normal images converge in < 20)
MEAN_ITERATIVE_MAX_ITERATIONS = 1000
