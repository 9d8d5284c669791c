"""Constants for the recipe normalizer."""

# Configuration keys
CONF_AI_ENABLED = "ai_enabled"
CONF_AI_API_KEY = "ai_api_key"
CONF_AI_MODEL = "ai_model"
CONF_VISION_MODEL = "vision_model"
CONF_ALWAYS_USE_AI = "always_use_ai"
CONF_VIDEO_ENABLED = "video_enabled"
CONF_VIDEO_MAX_SECONDS = "video_max_seconds"
CONF_STORE_VIDEOS = "store_videos"
CONF_TRANSCRIPTION_API_KEY = "transcription_api_key"
CONF_TRANSCRIPTION_MODEL = "transcription_model"
CONF_UPLOADS_DIR = "uploads_dir"
CONF_MAX_IMAGES = "max_recipe_images"
CONF_MAX_VIDEOS = "max_recipe_videos"
CONF_SCHEMA_INDICATORS = "schema_indicators"
CONF_CONTENT_INDICATORS = "content_indicators"
CONF_UNITS = "units"

# Default values
DEFAULT_MODEL = "gemini-2.5-flash-lite"
DEFAULT_VISION_MODEL = "gemini-2.5-flash"
DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RESPONSE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_MAX_AI_INPUT_LENGTH = 50000
DEFAULT_MAX_IMAGES = 10
DEFAULT_MAX_VIDEOS = 3
DEFAULT_VIDEO_MAX_SECONDS = 20 * 60
DEFAULT_UPLOADS_DIR = "uploads"

# Available models
AVAILABLE_MODELS = [
    "gemini-2.5-flash-lite",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
]

# Page heuristics: a page is considered a recipe if it carries any schema
# indicator, or at least two content indicators.
DEFAULT_SCHEMA_INDICATORS = [
    '"@type":"recipe"',
    '"@type": "recipe"',
    "schema.org/recipe",
    'itemtype="http://schema.org/recipe"',
    'itemtype="https://schema.org/recipe"',
]

DEFAULT_CONTENT_INDICATORS = [
    "ingredients",
    "instructions",
    "directions",
    "preparation",
    "servings",
    "prep time",
    "cook time",
    "tablespoon",
    "teaspoon",
]

MIN_CONTENT_INDICATOR_HITS = 2

# Video platforms handled by the transcript pipeline
VIDEO_URL_PATTERNS = [
    r"^https?://(?:www\.|m\.)?youtube\.com/(?:watch|shorts/|live/)",
    r"^https?://youtu\.be/",
    r"^https?://(?:www\.)?instagram\.com/(?:reel|reels|p|tv)/",
    r"^https?://(?:www\.|vm\.|vt\.)?tiktok\.com/",
    r"^https?://(?:www\.|player\.)?vimeo\.com/\d+",
    r"^https?://(?:www\.|m\.)?facebook\.com/(?:watch|reel|[^/]+/videos/)",
    r"^https?://fb\.watch/",
]

# Storage layout
RECIPES_SUBDIR = "recipes"
RECIPES_URL_PREFIX = "/recipes/"

# Archive formats
MELA_EXTENSION = ".melarecipe"
PAPRIKA_EXTENSION = ".paprikarecipe"

# Fuzzy store preference matching (0 = exact, 1 = match anything)
FUZZY_THRESHOLD = 0.4
FUZZY_MIN_MATCH_LENGTH = 2

# AI result codes
AI_DISABLED = "AI_DISABLED"
VALIDATION_ERROR = "VALIDATION_ERROR"
RATE_LIMIT = "RATE_LIMIT"
TIMEOUT = "TIMEOUT"
UNKNOWN_ERROR = "UNKNOWN"
