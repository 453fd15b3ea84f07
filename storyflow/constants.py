"""Shared constants for the storyflow pipeline."""

TOTAL_STEPS = 7
STEP_NUMBERS = tuple(range(1, TOTAL_STEPS + 1))

# Steps whose data the later steps are built on.
FOUNDATIONAL_STEPS = (1, 2, 3)

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

DEFAULT_LANGUAGE = "en"
MIN_SCENES = 1
MAX_SCENES = 20
DEFAULT_SCENES = 5

FALLBACK_VOICE = "alloy"
DEFAULT_BGM_VOLUME = 0.5
BGM_NONE = "none"
DEFAULT_BGM_URL = (
    "https://github.com/receptron/mulmocast-media/raw/refs/heads/main/bgms/story002.mp3"
)

DEFAULT_IMAGE_MODEL = "gpt-image-1"
DEFAULT_SPEECH_PROVIDER = "openai"
FORMAT_VERSION = "1.0"
DEFAULT_TITLE = "untitled"

DEFAULT_STYLE = "anime style, soft pastel colors, delicate line art, cinematic lighting"

IMAGE_STYLE_PRESETS = {
    "anime": DEFAULT_STYLE,
    "watercolor": "watercolor painting, soft edges, gentle color washes, textured paper",
    "oil": "oil painting, rich colors, visible brush strokes, classical composition",
    "comic": "comic book style, bold outlines, flat colors, dynamic panels",
    "realistic": "photorealistic, natural lighting, detailed textures, cinematic framing",
}

DEFAULT_CAPTION_STYLES = [
    "font-family: Arial, sans-serif",
    "font-size: 32px",
    "color: white",
    "text-align: center",
    "text-shadow: 0px 0px 20px rgba(0, 0, 0, 1.0)",
    "position: absolute",
    "bottom: 0px",
    "width: 80%",
    "padding-left: 10%",
    "padding-right: 10%",
    "padding-top: 4px",
    "background: rgba(0, 0, 0, 0.4)",
    "word-wrap: break-word",
    "overflow-wrap: break-word",
]

# Status labels reported by headless runs, one per step.
RUN_STEP_LABELS = (
    "analyzing",
    "structuring",
    "characters",
    "script",
    "voices",
    "finalizing",
    "generating",
)
