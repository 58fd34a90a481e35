"""
Prompt templates for listing description generation.

Three styles are available: ``detailed`` (100-200 words), ``concise``
(50-75 words) and ``seo`` (120-180 words). Templates target a South African
second-hand marketplace.
"""

import re
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from .models import Category, Condition, DescriptionStyle

CATEGORY_FOCUS: Dict[Category, str] = {
    Category.ELECTRONICS: "brand (if visible), model details, ports/connections, screen size, color, included accessories",
    Category.CLOTHING: "brand (if visible), size indicators, color, material/fabric, style, pattern, fit type",
    Category.HOME_GARDEN: "dimensions (approximate), material, color, style/design, assembly state, functionality",
    Category.SPORTS: "brand (if visible), size, color, sport type, material, wear indicators",
    Category.BOOKS: "title, author (if visible), condition of pages, cover type, edition details, language",
    Category.TOYS: "brand (if visible), age range indicators, completeness, color, material, interactive features",
    Category.VEHICLES: "make/model (if visible), color, body type, visible modifications, wheel condition, exterior state",
    Category.COLLECTIBLES: "brand/manufacturer, era/vintage indicators, material, authenticity markers, completeness",
    Category.BABY_KIDS: "brand (if visible), age range, safety features, color, material, cleanliness",
    Category.PET_SUPPLIES: "size indicators, material, color, pet type suitability, cleanliness, durability",
}  # fmt: skip

CONDITION_DESCRIPTORS: Dict[Condition, str] = {
    Condition.NEW: "brand new, unopened, or unused with original packaging/tags",
    Condition.LIKE_NEW: "barely used, excellent condition with minimal to no signs of wear",
    Condition.GOOD: "gently used, fully functional with minor cosmetic wear",
    Condition.FAIR: "moderate use visible, fully functional but shows wear",
    Condition.POOR: "heavy wear visible, may need repairs or have cosmetic damage",
}

SAFETY_GUIDELINES = """
IMPORTANT GUIDELINES:
- Only describe what is clearly visible in the image
- Do not make assumptions about features not shown
- Avoid superlatives or exaggerated marketing language
- Do not mention prices (seller will set separately)
- Exclude any personally identifiable information if visible
- Focus on factual, observable attributes
- Use South African spelling (colour not color, centre not center)
- Currency references should use "R" for Rand
- Avoid mentioning competing brands or marketplaces
"""


class RenderedPrompt(BaseModel):
    """Prompt text and sampling parameters for one request."""

    system_prompt: str
    user_prompt: str
    temperature: float = Field(ge=0.0, le=2.0)
    max_output_tokens: int = Field(ge=1)


class PromptTemplate(BaseModel):
    system_prompt: str
    user_prompt: Callable[[Category, Condition, Optional[str]], str]
    min_words: int
    max_words: int
    max_characters: int
    temperature: float
    max_output_tokens: int


CATEGORY_LABELS: Dict[Category, str] = {
    Category.ELECTRONICS: "Electronics",
    Category.CLOTHING: "Clothing & Fashion",
    Category.HOME_GARDEN: "Home & Garden",
    Category.SPORTS: "Sports & Outdoors",
    Category.BOOKS: "Books & Media",
    Category.TOYS: "Toys & Games",
    Category.VEHICLES: "Vehicles",
    Category.COLLECTIBLES: "Collectibles & Art",
    Category.BABY_KIDS: "Baby & Kids",
    Category.PET_SUPPLIES: "Pet Supplies",
}


def _label(category: Category) -> str:
    return CATEGORY_LABELS[category]


def _title_request(title: Optional[str], hint: str) -> str:
    if title:
        return ""
    return (
        "First, provide a suggested title on its own line in this exact format:\n"
        f"TITLE: [{hint}]\n\n"
        "Then provide the description below.\n\n"
    )


def _detailed_user_prompt(
    category: Category, condition: Condition, title: Optional[str]
) -> str:
    seller_title = ""
    if title:
        seller_title = f'- Seller\'s Title: "{title}" (improve if needed)\n'
    return (
        "Analyze this product image and create a detailed listing for a "
        f"{_label(category).lower()} item.\n\n"
        "Product Context:\n"
        f"- Category: {_label(category)}\n"
        f"- Condition: {condition.value} ({CONDITION_DESCRIPTORS[condition]})\n"
        f"{seller_title}\n"
        "Focus on these observable attributes:\n"
        f"{CATEGORY_FOCUS[category]}\n\n"
        + _title_request(
            title, "suggested title - max 100 characters, specific and descriptive"
        )
        + "Structure your description as follows:\n"
        "1. Opening sentence: What the item is and its most notable feature\n"
        "2. Physical description: Size, color, material, design elements\n"
        "3. Condition details: Specific observations about wear, functionality\n"
        "4. Special features or included items (if visible)\n"
        "5. Ideal use case or buyer profile\n\n"
        "Requirements:\n"
        "- Length: 100-200 words\n"
        "- Write in a friendly, informative tone\n"
        "- Use present tense\n"
        "- Mention any visible defects honestly\n"
        "- End with a positive note about the item's value\n\n"
        "Remember: This is for the South African market. "
        "Use local terminology where appropriate."
    )


def _concise_user_prompt(
    category: Category, condition: Condition, title: Optional[str]
) -> str:
    seller_title = f'- Title: "{title}"\n' if title else ""
    return (
        "Create a concise product listing for this "
        f"{_label(category).lower()} item.\n\n"
        "Context:\n"
        f"- Category: {_label(category)}\n"
        f"- Condition: {condition.value}\n"
        f"{seller_title}\n"
        + _title_request(title, "concise title - max 100 characters")
        + "Write a brief 50-75 word description that covers:\n"
        "1. What the item is\n"
        "2. Key physical attributes (color, size, material)\n"
        "3. Current condition\n"
        "4. Most notable features\n\n"
        f"Focus on: {CATEGORY_FOCUS[category]}\n\n"
        "Be direct and factual. Use short sentences. "
        "Include only what's clearly visible."
    )


def _seo_user_prompt(
    category: Category, condition: Condition, title: Optional[str]
) -> str:
    seller_title = f'- Listing Title: "{title}"\n' if title else ""
    return (
        "Analyze this image and create an SEO-optimized listing for a "
        f"{_label(category).lower()} product.\n\n"
        "Product Information:\n"
        f"- Category: {_label(category)}\n"
        f"- Condition: {condition.value} ({CONDITION_DESCRIPTORS[condition]})\n"
        f"{seller_title}\n"
        "Important attributes to describe:\n"
        f"{CATEGORY_FOCUS[category]}\n\n"
        + _title_request(
            title, "SEO title - max 100 characters, include brand/model/keywords"
        )
        + "Create a 120-180 word description that:\n"
        "1. Opens with the product type and key identifying features\n"
        "2. Naturally includes relevant keywords (brand, model, type, color, size)\n"
        "3. Describes physical attributes in detail\n"
        "4. Mentions condition with specific observations\n"
        "5. Ends with use cases or suitable buyer scenarios\n\n"
        "Include long-tail keywords naturally and avoid keyword stuffing."
    )


TEMPLATES: Dict[DescriptionStyle, PromptTemplate] = {
    DescriptionStyle.DETAILED: PromptTemplate(
        system_prompt=(
            "You are a professional product description writer for a trusted "
            "South African second-hand marketplace. Create detailed, honest and "
            "engaging product descriptions that help buyers make informed "
            "decisions.\n" + SAFETY_GUIDELINES
        ),
        user_prompt=_detailed_user_prompt,
        min_words=100,
        max_words=200,
        max_characters=1500,
        temperature=0.7,
        max_output_tokens=400,
    ),
    DescriptionStyle.CONCISE: PromptTemplate(
        system_prompt=(
            "You are writing brief, clear product descriptions for a South "
            "African second-hand marketplace. Focus on the essential details "
            "buyers need to know.\n" + SAFETY_GUIDELINES
        ),
        user_prompt=_concise_user_prompt,
        min_words=50,
        max_words=75,
        max_characters=600,
        temperature=0.6,
        max_output_tokens=200,
    ),
    DescriptionStyle.SEO: PromptTemplate(
        system_prompt=(
            "You are an SEO-conscious product description writer for a South "
            "African online marketplace. Create descriptions that are both "
            "search-friendly and genuinely helpful to buyers.\n" + SAFETY_GUIDELINES
        ),
        user_prompt=_seo_user_prompt,
        min_words=120,
        max_words=180,
        max_characters=1400,
        temperature=0.65,
        max_output_tokens=350,
    ),
}


def generate_prompt(
    category: Category,
    condition: Condition,
    style: DescriptionStyle = DescriptionStyle.DETAILED,
    title: Optional[str] = None,
) -> RenderedPrompt:
    """Render the prompt for a category, condition and style."""
    template = TEMPLATES[style]
    return RenderedPrompt(
        system_prompt=template.system_prompt,
        user_prompt=template.user_prompt(category, condition, title),
        temperature=template.temperature,
        max_output_tokens=template.max_output_tokens,
    )


PROHIBITED_PATTERNS = [
    re.compile(r"R\s*\d+"),  # prices
    re.compile(r"\b(?:whatsapp|email|phone|call|contact)\b", re.IGNORECASE),
    re.compile(r"\b(?:gumtree|olx|facebook|marketplace)\b", re.IGNORECASE),
    re.compile(r"\b(?:urgent|hurry|limited time)\b", re.IGNORECASE),
]


def validate_description(description: str, style: DescriptionStyle) -> List[str]:
    """
    Check a generated description against its template's guidelines.

    Returns:
        List[str]: Human-readable issues, empty when the description complies
    """
    template = TEMPLATES[style]
    issues: List[str] = []

    if len(description) > template.max_characters:
        issues.append(f"Exceeds {template.max_characters} character limit")

    word_count = len(description.split())
    if word_count < template.min_words:
        issues.append(f"Below minimum word count of {template.min_words}")
    if word_count > template.max_words:
        issues.append(f"Exceeds maximum word count of {template.max_words}")

    for pattern in PROHIBITED_PATTERNS:
        if pattern.search(description):
            issues.append(f"Contains prohibited content: {pattern.pattern}")

    return issues
