"""
ScriptReel 공통 상수 모듈

프로젝트 전체에서 반복 사용되는 상수를 단일 소스로 관리합니다.
"""

# ─── 모델명 ───────────────────────────────────────────────
MODEL_TEXT_DEFAULT = "gpt-4o-mini"
MODEL_IMAGE_DEFAULT = "dall-e-3"

# ─── 캐릭터 기본값 ────────────────────────────────────────
MAX_TRAITS = 5
DEFAULT_CHARACTER_NAME = "Unnamed Character"
DEFAULT_CHARACTER_ROLE = "Supporting Character"
DEFAULT_TRAITS = ["Adaptable", "Creative"]
DEFAULT_DESCRIPTION_TEMPLATE = "A character suitable for a {theme} theme video"

ROLE_PROTAGONIST = "Protagonist"
ROLE_SUPPORTING = "Supporting Character"

# ─── 테마 키워드 → fallback 캐릭터 이름 (순서대로 매칭) ─────
THEME_CHARACTER_NAMES = [
    (("adventure",), ("Explorer Alex", "Guide Jordan")),
    (("scifi", "sci-fi"), ("Captain Nova", "Engineer Zeta")),
    (("romance",), ("Taylor", "Riley")),
    (("mystery", "detective"), ("Detective Morgan", "Witness Jamie")),
]
DEFAULT_CHARACTER_NAMES = ("Alex", "Jordan")

PROTAGONIST_TRAITS = ["Confident", "Creative", "Resourceful"]
SUPPORTING_TRAITS = ["Supportive", "Curious", "Insightful"]

# ─── 사진 옵션 ────────────────────────────────────────────
DEFAULT_PHOTO_COUNT = 3
DEFAULT_PHOTO_STYLE = "realistic"
PHOTO_WIDTH = 400
PHOTO_HEIGHT = 600
FALLBACK_PHOTO_URL = "https://picsum.photos/seed/{seed}/400/600"

# ─── 비디오 옵션 ──────────────────────────────────────────
DEFAULT_VIDEO_COUNT = 3
MAX_VIDEO_OPTIONS = 5
FALLBACK_VIDEO_DURATION_SEC = 30
FALLBACK_THUMBNAIL_URL = "https://picsum.photos/seed/{seed}/400/225"
FALLBACK_VIDEO_POOL = [
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4",
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ElephantsDream.mp4",
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ForBiggerBlazes.mp4",
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/WeAreGoingOnBullrun.mp4",
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/SubaruOutbackOnStreetAndDirt.mp4",
]

# ─── 스타일별 사진 프롬프트 요소 ──────────────────────────
STYLE_PROMPTS = {
    "realistic": "photorealistic style, natural lighting, contemporary setting",
    "anime": "anime art style, large expressive eyes, stylized features",
    "comic": "comic book art style, bold colors, dynamic composition",
    "cyberpunk": "cyberpunk aesthetic, neon lighting, futuristic elements",
    "fantasy": "fantasy art style, magical atmosphere, ethereal lighting",
    "noir": "film noir style, dramatic shadows, monochromatic tones",
}
DEFAULT_STYLE_PROMPT = "professional photography style"
