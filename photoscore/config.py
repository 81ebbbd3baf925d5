"""
Calibration constants and thresholds for the image-quality heuristics.
Tune these without touching the scoring logic.
"""

# --- Grayscale (ITU-R BT.601 luma) ---
LUMA_WEIGHTS = (0.299, 0.587, 0.114)  # R, G, B

# --- Sharpness (Laplacian variance) ---
LAPLACIAN_DIVISOR = 10.0  # variance / this -> 0..100 (variance ~500 lands at 50)
SHARP_MIN = 50            # >= sharp
SLIGHT_BLUR_MIN = 30      # >= slight-blur, below this isBlurry
BLURRY_MIN = 15           # >= blurry, below this very-blurry

# --- Exposure ---
BRIGHTNESS_PLATEAU = (100.0, 180.0)  # raw mean intensity scored 100
CONTRAST_STD_FULL = 70.0             # std dev that earns a full contrast score
WEIGHT_BRIGHTNESS = 0.6
WEIGHT_CONTRAST = 0.4
BRIGHTNESS_ISSUE_BELOW = 40
CONTRAST_ISSUE_BELOW = 25
GOOD_LIGHTING_MIN = 50

# --- Expression (smile) ---
NEGATIVE_EMOTIONS = ("sad", "angry")
NEGATIVE_FLOOR = 0.3      # negative probability tolerated before penalizing
NEGATIVE_PENALTY = 50.0   # points per unit of probability above the floor
CLEAR_SMILE_MIN = 70
SLIGHT_SMILE_MIN = 45

# --- Composite weights (sum to 1.0) ---
WEIGHT_BLUR = 0.35
WEIGHT_LIGHTING = 0.35
WEIGHT_SMILE = 0.30

# --- Upload validation ---
SUPPORTED_FORMATS = ("jpeg", "jpg", "png", "webp")
MIN_DIMENSION = 200
MAX_DIMENSION = 4000
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
