from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Edge pipeline
    EDGE_THRESHOLD: int = 50
    # Components with this many pixels or fewer are treated as noise
    MIN_CONTOUR_POINTS: int = 50
    # Hard cap on flood-fill growth per component
    MAX_CONTOUR_POINTS: int = 10000
    EPSILON: float = 0.02

    # Document classification
    MIN_AREA: float = 0.1
    MAX_AREA: float = 0.9
    MIN_ANGLE: float = 60.0
    MAX_ANGLE: float = 120.0
    # Relative area at which confidence reaches 1.0
    FULL_CONFIDENCE_AREA: float = 0.5

    # Live scanner
    SCAN_MIN_AREA: float = 0.15
    SCAN_MAX_AREA: float = 0.85
    DETECTION_INTERVAL_MS: int = 500
    READY_CONFIDENCE: float = 0.7

    # Image Quality Thresholds
    BLUR_THRESHOLD: float = 100
    LOW_LIGHT_THRESHOLD: float = 80
    BRIGHTNESS_SAMPLE_STRIDE: int = 4

    # Passport photo validation (portraits are much softer than documents)
    PHOTO_MIN_SIZE: int = 300
    PHOTO_MIN_ASPECT: float = 0.7
    PHOTO_MAX_ASPECT: float = 1.1
    PHOTO_MIN_BRIGHTNESS: float = 50
    PHOTO_MAX_BRIGHTNESS: float = 200
    PHOTO_BLUR_THRESHOLD: float = 2.0

    class Config:
        env_file = ".env"

settings = Settings()

# Overlay palette (RGBA)
READY_COLOR = (34, 197, 94, 255)
ALIGN_COLOR = (234, 179, 8, 255)
GUIDE_COLOR = (255, 255, 255, 128)
TEXT_FILL = (255, 255, 255, 255)
TEXT_STROKE = (0, 0, 0, 255)

# User-facing messages
BLUR_WARNING = "Image appears blurry. Hold camera steady."
LOW_LIGHT_WARNING = "Low light detected. Move to brighter area."
READY_TEXT = "Document Detected"
ALIGN_TEXT = "Align Document"
GUIDE_TEXT = "Position document within frame"
