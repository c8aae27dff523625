"""Enumerated value sets shared by models, schemas and the feed client."""
from enum import StrEnum


class Category(StrEnum):
    """Prompt category."""

    CODING = "Coding"
    DEVELOPING = "Developing"
    DEBUGGING = "Debugging"
    UI_UX = "UI/UX"
    DESIGNING = "Designing"
    CREATIVE = "Creative"
    WRITING = "Writing"
    MARKETING = "Marketing"
    DATA_ANALYSIS = "Data Analysis"
    EDUCATION = "Education"
    BUSINESS = "Business"
    PRODUCTIVITY = "Productivity"
    OTHER = "Other"


class AiTool(StrEnum):
    """AI tool a prompt targets."""

    # OpenAI
    GPT_4O = "GPT-4o"
    GPT_4O_MINI = "GPT-4o Mini"
    GPT_4_TURBO = "GPT-4 Turbo"
    O1 = "o1"
    O1_MINI = "o1 Mini"
    O3_MINI = "o3 Mini"
    CHATGPT = "ChatGPT"
    DALL_E_3 = "DALL-E 3"
    SORA = "Sora"
    # Anthropic
    CLAUDE_SONNET_4_6 = "Claude Sonnet 4.6"
    CLAUDE_SONNET_4_5 = "Claude Sonnet 4.5"
    CLAUDE_HAIKU_4_5 = "Claude Haiku 4.5"
    CLAUDE_3_5_SONNET = "Claude 3.5 Sonnet"
    CLAUDE_3_5_HAIKU = "Claude 3.5 Haiku"
    CLAUDE_3_OPUS = "Claude 3 Opus"
    CLAUDE = "Claude"
    # Google
    GEMINI_2_5_PRO = "Gemini 2.5 Pro"
    GEMINI_2_5_FLASH = "Gemini 2.5 Flash"
    GEMINI_2_0_FLASH = "Gemini 2.0 Flash"
    GEMINI_1_5_PRO = "Gemini 1.5 Pro"
    GEMINI_1_5_FLASH = "Gemini 1.5 Flash"
    GEMINI = "Gemini"
    # xAI
    GROK_3 = "Grok 3"
    GROK_2 = "Grok 2"
    # Meta
    LLAMA_3_1 = "Llama 3.1"
    LLAMA_3 = "Llama 3"
    # DeepSeek
    DEEPSEEK_R1 = "DeepSeek R1"
    DEEPSEEK_V3 = "DeepSeek V3"
    DEEPSEEK_CODER = "DeepSeek Coder"
    # Mistral
    MISTRAL_LARGE = "Mistral Large"
    MISTRAL_MEDIUM = "Mistral Medium"
    MISTRAL = "Mistral"
    # Coding tools
    GITHUB_COPILOT = "GitHub Copilot"
    CURSOR = "Cursor"
    CODEIUM = "Codeium"
    WINDSURF = "Windsurf"
    TABNINE = "Tabnine"
    # Image generation
    MIDJOURNEY_V6 = "Midjourney v6"
    MIDJOURNEY = "Midjourney"
    STABLE_DIFFUSION_3 = "Stable Diffusion 3"
    STABLE_DIFFUSION = "Stable Diffusion"
    LEONARDO_AI = "Leonardo AI"
    IDEOGRAM = "Ideogram"
    FLUX = "Flux"
    ADOBE_FIREFLY = "Adobe Firefly"
    # Video generation
    RUNWAY_GEN_3 = "Runway Gen-3"
    PIKA = "Pika"
    KLING = "Kling"
    VEO_2 = "Veo 2"
    # Search and research
    PERPLEXITY = "Perplexity"
    COHERE = "Cohere"
    OTHER = "Other"


class Difficulty(StrEnum):
    """How much prompting experience a prompt assumes."""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class ResultType(StrEnum):
    """Kind of example output attached to a prompt."""

    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    LINK = "LINK"


class UserRole(StrEnum):
    """Account role."""

    USER = "USER"
    ADMIN = "ADMIN"


class FeedSort(StrEnum):
    """Sort keys accepted by the feed query engine."""

    TRENDING = "trending"
    NEWEST = "newest"
    OLDEST = "oldest"
    UPVOTES = "upvotes"
    SAVED = "saved"
    VIEWS = "views"
    COPIES = "copies"
