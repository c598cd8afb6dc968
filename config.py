"""Configuration settings for the n+1 flashcard deck builder."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int | None = None) -> int | None:
    """Read a positive integer from the environment, falling back to default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# Base paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
PROMPTS_DIR = PROJECT_ROOT / "prompts"

# Input/Output files
NOTES_PATH = Path(os.getenv("NOTES_PATH", DATA_DIR / "notes.txt"))
KNOWN_PATH = Path(os.getenv("KNOWN_PATH", DATA_DIR / "known-words.txt"))
OUTPUT_PATH = Path(os.getenv("OUTPUT_PATH", DATA_DIR / "flashcards.csv"))
IMAGES_DIR = Path(os.getenv("IMAGES_DIR", PROJECT_ROOT / "images"))

# Prompt templates
SENTENCE_GENERATION_PROMPT = PROMPTS_DIR / "sentence_generation.txt"
IMAGE_PROMPT_TEMPLATE = PROMPTS_DIR / "image_prompt.txt"

# OpenAI settings
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")
OPENAI_BASE_URL = os.getenv("OPENAI_URI_BASE", "https://api.openai.com/v1")
OPENAI_REASONING_EFFORT = os.getenv("OPENAI_REASONING_EFFORT", "medium")
OPENAI_PROMPT_REASONING_EFFORT = "low"
OPENAI_TIMEOUT = 600  # seconds
OPENAI_MAX_RETRIES = 0  # no automatic retries

# Replicate settings (Seedream 4)
REPLICATE_API_URL = "https://api.replicate.com/v1/models"
REPLICATE_API_TOKEN = os.getenv("REPLICATE_API_TOKEN", "")
REPLICATE_MODEL = os.getenv("REPLICATE_MODEL", "bytedance/seedream-4")
REPLICATE_ASPECT_RATIO = os.getenv("REPLICATE_ASPECT_RATIO", "4:3")
REPLICATE_TIMEOUT = 300  # seconds
DOWNLOAD_TIMEOUT = 60  # seconds
DOWNLOAD_MAX_REDIRECTS = 3

# Processing settings
START_INDEX = _env_int("START_INDEX", 1)  # 1-based row index
LIMIT = _env_int("LIMIT")  # optional: process only N rows from START_INDEX
DEFAULT_CONCURRENCY = 5
CONCURRENCY = _env_int("CONCURRENCY", DEFAULT_CONCURRENCY)

# Card settings
CARD_ID_PREFIX = os.getenv("CARD_ID_PREFIX", "JPN1K-")
IMAGE_EXTENSION = "jpeg"

SENTENCE_HEADER = [
    "ID",
    "Ranking",
    "JP",
    "EN",
    "JP Furigana",
    "Pronounciation",
    "Sentence JP",
    "Sentence EN",
    "Sentence Romaji",
    "Sentence pronounciation",
    "Explanation",
]

# Grammar/function words allowed even if not in the known list
ALLOWED_GRAMMAR = """
は が を に へ で と も の か ね よ から まで だけ など だけど でも そして しかし だから ので のでした
だ です でした じゃない じゃありません ます ました ません ましょう たい た て ている いる ある ですか ください
この その あの ここ そこ あそこ これ それ あれ もう まだ とても すごく たくさん 少し ちょっと いつ どこ だれ 何 なん どう
一 二 三 四 五 六 七 八 九 十 百 千 万 円 時 分 日 月 年 週 回 人 目
。 、 ！ ？
""".split()

# Image styles with sampling weights
IMAGE_STYLES = [
    ("Candid (unposed) photography", 5),
    ("iPhone midday photography", 5),
    ("Cinematic", 5),
    ("1990s leica film photography", 1),
    ("Watercolor painting", 1),
    ("Oil painting", 1),
    ("Ink drawing", 1),
    ("Pixel art", 1),
    ("Cyberpunk", 1),
    ("Isometric illustration", 1),
    ("Retro-futurist oil painting", 1),
    ("Spontaneous smartphone photo", 1),
    ("3d high quality video game", 1),
    ("High quality anime", 1),
]

SUBJECT_GENDERS = ["man", "woman"]
SMILE_RULES = ["", "Do not have them smile unless relevant for the sentence."]
