"""
Purpose:
- Read-only catalog of prompt styles (system/user prompt + default length + negative filters)
  and caption templates (prompts tuned for LoRA training on specific image models).
- Used only to populate a CaptionRequest / PostProcessConfig before a batch starts.

Extensibility:
- Add a PromptStyle to PROMPT_STYLES or a CaptionTemplate to CAPTION_TEMPLATES.
- Shared meta-phrase filters live in COMMON_META_PHRASES.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import UnknownPresetError
from .postprocess import PostProcessConfig

# Phrases models use to narrate instead of describe ("this image shows ...")
COMMON_META_PHRASES: Tuple[str, ...] = (
    "this image shows",
    "the image depicts",
    "this picture shows",
    "the picture depicts",
    "the photo shows",
    "this photo shows",
    "we can see",
    "you can see",
    "there is a",
    "there are",
    "it appears",
    "it seems",
    "looking at",
)

HEDGING_PHRASES: Tuple[str, ...] = ("appears to be", "seems to be", "looks like")


@dataclass(frozen=True)
class PromptStyle:
    id: str
    name: str
    description: str
    format: str             # "tags" | "semantic"
    system_message: str
    user_prompt: str
    default_max_chars: Optional[int] = None
    negative_filters: Tuple[str, ...] = ()

    def post_process_config(
        self, prefix: str = "", suffix: str = "", max_chars: Optional[int] = None
    ) -> PostProcessConfig:
        """Explicit max_chars wins over the style default."""
        return PostProcessConfig(
            prefix=prefix,
            suffix=suffix,
            max_chars=max_chars if max_chars is not None else self.default_max_chars,
            negative_filters=self.negative_filters,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "format": self.format,
            "systemMessage": self.system_message,
            "userPrompt": self.user_prompt,
            "defaultMaxChars": self.default_max_chars,
            "negativeFilters": list(self.negative_filters),
        }


@dataclass(frozen=True)
class CaptionTemplate:
    id: str
    name: str
    description: str
    system_message: str
    user_prompt: str
    model_type: str         # "general" | "z-image" | "flux" | "sdxl"
    category: str           # "general" | "person" | "style"

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "systemMessage": self.system_message,
            "userPrompt": self.user_prompt,
            "modelType": self.model_type,
            "category": self.category,
        }


# --- Prompt styles -----------------------------------------------------------

PROMPT_STYLES: Tuple[PromptStyle, ...] = (
    PromptStyle(
        id="flux-semantic",
        name="FLUX (Semantic)",
        description="Natural language descriptions in semantic sentences",
        format="semantic",
        system_message=(
            "Generate a detailed, natural language caption for FLUX image generation. "
            "Use complete phrases and descriptive language. Focus on visual elements, composition, "
            "lighting, and style. Describe directly without meta-commentary. No markdown."
        ),
        user_prompt=(
            "Describe the image directly: subject and pose, clothing and appearance, environment and "
            "setting, lighting and mood, colors and textures, artistic style. Use natural, flowing "
            "phrases separated by commas."
        ),
        default_max_chars=500,
        negative_filters=COMMON_META_PHRASES,
    ),
    PromptStyle(
        id="character-flux",
        name="Character FLUX",
        description="Comprehensive character LoRA training with tattoo/text preservation (100-150 words)",
        format="semantic",
        system_message=(
            "You are a specialized caption generator for Flux LoRa character training. Generate "
            "comprehensive natural language descriptions that preserve fine details like text tattoos, "
            "accessories, and defining features.\n\n"
            "CRITICAL RULES:\n"
            "1. Start every caption with [TRIGGER] placeholder\n"
            "2. ALWAYS describe permanent features consistently: tattoos (including exact text if visible), "
            "distinctive markings, accessories worn in multiple images\n"
            "3. Caption both permanent features AND variables (clothing, environment, pose)\n"
            "4. For text tattoos: transcribe the exact text and describe placement\n"
            "5. Be exhaustive about visible details - Flux's T5 encoder handles 200+ tokens well\n"
            "6. Use flowing natural language, but be highly specific\n"
            "7. Target 100-150 words for character LoRas\n\n"
            "STRUCTURE (as natural prose): [TRIGGER] + medium + detailed permanent features (tattoos with "
            "text, consistent accessories) + current clothing details + pose/action + environment "
            "description + lighting + camera angle\n\n"
            "TEXT TATTOOS: Always format as: \"[exact text] tattoo on [location]\"\n"
            "EXAMPLE: \"'KARMA' text tattoo in capital letters on front of neck below chin\""
        ),
        user_prompt=(
            "Describe this image in comprehensive natural language for Flux character LoRa training, "
            "preserving all fine details.\n\n"
            "Follow this structure as flowing prose (100-150 words):\n\n"
            "1. Start with [TRIGGER]\n"
            "2. Identify medium (photograph/digital art)\n"
            "3. COMPREHENSIVELY describe all visible tattoos:\n"
            "   - For text tattoos: transcribe exact text in quotes, specify exact placement\n"
            "   - For image tattoos: describe subject, style, and precise location\n"
            "   - Include visibility (partially visible, fully visible, obscured)\n"
            "4. Describe any consistent accessories (jewelry, piercings)\n"
            "5. Describe current variable clothing with specific colors, styles, and fit\n"
            "6. Describe the action, pose, and body positioning in detail\n"
            "7. Describe environment with specific elements and spatial relationships\n"
            "8. Describe lighting: direction, quality (harsh/soft), color temperature, shadows\n"
            "9. Describe camera: angle, distance, framing, perspective\n\n"
            "Be exhaustively detailed on permanent features (tattoos, jewelry) and precise about variables. "
            "Flux handles long captions well - use the full 150 words."
        ),
        default_max_chars=750,
        negative_filters=COMMON_META_PHRASES + HEDGING_PHRASES + ("might be",),
    ),
    PromptStyle(
        id="sdxl-tags",
        name="SDXL (Tags)",
        description="Tag-based format with comma-separated descriptors",
        format="tags",
        system_message=(
            "Generate SDXL training tags. Use concise, comma-separated descriptors. Include: subject "
            "details, clothing, pose, environment, lighting, camera angle, art medium, quality tags. "
            "Use direct tags only, no sentences or meta-phrases."
        ),
        user_prompt=(
            "Tag: subject and pose, clothing items, environment type, lighting condition, camera angle, "
            "shot distance, art medium (photograph/digital art/painting), quality level, specific details. "
            "Use comma-separated tags."
        ),
        default_max_chars=450,
        negative_filters=COMMON_META_PHRASES,
    ),
    PromptStyle(
        id="character-sdxl",
        name="Character SDXL",
        description="Character LoRA training with permanent feature focus (60-90 words)",
        format="semantic",
        system_message=(
            "You are a specialized caption generator for SDXL LoRa character training. Generate detailed "
            "natural language descriptions focusing on permanent features and key variables.\n\n"
            "CRITICAL RULES:\n"
            "1. Start every caption with [TRIGGER] placeholder\n"
            "2. ALWAYS describe permanent tattoos consistently, including text content\n"
            "3. Prioritize important details - SDXL prefers 60-90 words\n"
            "4. Use complete sentences with natural flow\n"
            "5. For text tattoos: include exact text in quotes and location\n"
            "6. Balance permanent features with variable elements (clothing, setting, pose)\n\n"
            "STRUCTURE (as natural prose): [TRIGGER] + medium + key permanent features (tattoos with text) "
            "+ clothing + pose + environment + lighting + camera angle"
        ),
        user_prompt=(
            "Describe this image in detailed natural language for SDXL character LoRa training "
            "(60-90 words).\n\n"
            "Structure as flowing prose:\n\n"
            "1. Start with [TRIGGER]\n"
            "2. Describe visible tattoos including exact text for text tattoos "
            "(e.g., \"'KARMA' tattoo on neck\")\n"
            "3. Describe key accessories (jewelry)\n"
            "4. Describe clothing with colors and style\n"
            "5. Describe pose/action\n"
            "6. Describe environment briefly\n"
            "7. Describe lighting and camera angle\n\n"
            "Prioritize tattoo details and then most visually important elements. Keep total under 90 "
            "words while maintaining natural sentence flow."
        ),
        default_max_chars=500,
        negative_filters=COMMON_META_PHRASES + HEDGING_PHRASES + ("might be",),
    ),
    PromptStyle(
        id="booru-tags",
        name="Booru (Tags)",
        description="Booru-style underscored tags following Danbooru/WD14 conventions",
        format="tags",
        system_message=(
            "You generate booru-style tags. Output one line with lowercase tags separated by commas. Use "
            "underscores for multi-word tags. Order: subject count first (1girl, 1boy, 1person, 2girls, "
            "etc.), then anatomy or body parts visible, hair color and length, eye color, clothing items, "
            "actions or pose, camera view, environment, lighting, style. Avoid adjectives that are not "
            "part of common booru vocabulary. Do not invent artist tags. No sentences, no natural language."
        ),
        user_prompt=(
            "Generate one booru tag line for this image. Lowercase, comma separated, use underscores for "
            "multi-word tags. Start with subject count (1girl, 1boy, or 1person). Then anatomy/body parts "
            "visible, hair details, eye color, clothing items, action/pose, camera view (close-up, "
            "medium_shot, full_body, etc.), environment, lighting, art style. Follow Danbooru/WD14 tag "
            "conventions. No sentences."
        ),
        default_max_chars=400,
        negative_filters=COMMON_META_PHRASES,
    ),
    PromptStyle(
        id="seeddream-semantic",
        name="SeedDream (Semantic)",
        description="Natural language 25-45 words with composition and mood focus",
        format="semantic",
        system_message=(
            "You generate SeedDream-style semantic captions. Output one to two English sentences, 25–45 "
            "words total. Use evocative but concrete language. Always include subject and action, "
            "composition and lens or perspective, lighting and color palette, and stylistic intent or "
            "genre. Keep it readable, no tag spam. Emphasize mood and art direction since SeedDream "
            "supports rich natural language. No markdown, no meta-phrases."
        ),
        user_prompt=(
            "Create a SeedDream semantic caption. One or two sentences, 25–45 words total. Include: "
            "subject and action, composition or lens perspective, lighting and color palette, and "
            "stylistic intent or genre. Use natural, flowing language. No tag lists, no bullet points. "
            "Be evocative but concrete."
        ),
        default_max_chars=300,
        negative_filters=COMMON_META_PHRASES,
    ),
    PromptStyle(
        id="nano-banana-tags",
        name="Nano Banana (Tags)",
        description="Ultra-minimal 8-12 keyword tokens",
        format="tags",
        system_message=(
            "You generate ultra-concise tag keywords. Output one line with 8–12 comma-separated tokens. "
            "Only the most essential subject, action, environment, lighting, and one style term. No "
            "sentences, no weights, no negatives. Keep it minimal and focused."
        ),
        user_prompt=(
            "Produce one ultra-short keyword line for this image. 8–12 comma-separated tokens that cover: "
            "subject, action, environment, lighting, and one style term. Maximum brevity. No full "
            "sentences, no prompt weights, no negative prompts."
        ),
        default_max_chars=150,
        negative_filters=COMMON_META_PHRASES,
    ),
    PromptStyle(
        id="human-character",
        name="Human Character",
        description="Structured human description with mandatory fields",
        format="semantic",
        system_message=(
            "Generate a structured human character caption covering all mandatory fields: face (gaze, "
            "expression, skin texture), hair (style, color, length), clothing (specific items, colors, "
            "fit), body posture (stance, weight distribution, limb position), anatomy (proportions, "
            "visible features), hands (position, gesture, visibility), environment (setting, background "
            "elements), lighting (direction, quality, shadows), composition (framing, angle, distance). "
            "Use neutral, precise language. No demographic assumptions. Describe only what is visible."
        ),
        user_prompt=(
            "Describe the human character systematically:\n"
            "1. Face: gaze direction, facial expression, skin texture and tone\n"
            "2. Hair: style, color, length, texture\n"
            "3. Clothing: specific garments, colors, fit, style\n"
            "4. Body posture: stance (standing/sitting/etc), weight distribution, shoulder position, "
            "hip position\n"
            "5. Anatomy: body proportions, visible physical features, build\n"
            "6. Hands: position, gesture, visibility, what they hold or touch\n"
            "7. Environment: immediate surroundings, background elements, spatial context\n"
            "8. Lighting: light source direction, quality (soft/harsh), shadows, highlights\n"
            "9. Composition: camera angle, shot distance (close-up/medium/wide), framing\n"
            "10. Pose hint: specific pose description (e.g., \"standing, weight on left leg, right hand "
            "raised, shoulders relaxed, head tilted slightly\")\n\n"
            "Use neutral, descriptive language. Avoid unnecessary demographics. Focus on observable details."
        ),
        default_max_chars=700,
        negative_filters=COMMON_META_PHRASES + HEDGING_PHRASES,
    ),
    PromptStyle(
        id="custom",
        name="Custom",
        description="Define your own prompts and format",
        format="semantic",
        system_message=(
            "Generate a detailed caption. Do not use markdown. "
            "Do not use meta-phrases like \"this image shows\"."
        ),
        user_prompt="Describe this image, focusing on the main elements, style, and composition.",
        default_max_chars=500,
        negative_filters=COMMON_META_PHRASES,
    ),
)


# --- Caption templates -------------------------------------------------------

CAPTION_TEMPLATES: Tuple[CaptionTemplate, ...] = (
    CaptionTemplate(
        id="default-general",
        name="Default General",
        description="Standard captioning for most models (not optimized for Z-IMAGE LoRA training)",
        system_message=(
            "Generate a concise, yet detailed comma-separated caption. Do not use markdown. "
            "Do not have an intro or outro."
        ),
        user_prompt="Describe this image, focusing on the main elements, style, and composition.",
        model_type="general",
        category="general",
    ),
    CaptionTemplate(
        id="z-image-character-trigger",
        name="Z-IMAGE Character LoRA (Trigger Only)",
        description="Single trigger word - focuses 100% training energy on character features (recommended)",
        system_message=(
            "You are creating TRAINING CAPTIONS for Z-IMAGE character LoRA. Generate ONLY a unique "
            "trigger word/token for each image. This focuses all training energy on learning the "
            "character's unique features. Do NOT describe the character's appearance - the model will "
            "learn this automatically. Do NOT use conversational text or markdown. Output ONLY the "
            "trigger word."
        ),
        user_prompt=(
            "Generate a single, unique trigger word/token for this character.\n\n"
            "Guidelines:\n"
            "- Use a distinctive, non-common word to avoid vocabulary collisions\n"
            "- Examples: \"j0hnd0e\", \"alicechar\", \"cyb3rpunk_guy\", \"mystic_woman\"\n"
            "- Can include underscores or numbers for uniqueness\n"
            "- Must be consistent across all images of the same character\n"
            "- Output ONLY the trigger word, nothing else\n\n"
            "Example outputs:\n"
            "\"chr_alex\"\n"
            "\"m4r1a_character\"\n"
            "\"detective_jones\""
        ),
        model_type="z-image",
        category="person",
    ),
    CaptionTemplate(
        id="z-image-character-context",
        name="Z-IMAGE Character LoRA (Trigger + Context)",
        description="Trigger word + minimal context - excludes background/props from learning",
        system_message=(
            "You are creating TRAINING CAPTIONS for Z-IMAGE character LoRA. Generate a trigger word "
            "followed by minimal context description. Caption what you DON'T want the model to learn "
            "(background, props, temporary clothing) but DO NOT caption defining features you WANT it to "
            "learn (face, hair, body features). Keep it simple - 1 short sentence. Do NOT use markdown."
        ),
        user_prompt=(
            "Generate a caption with this format: [trigger_word], [context elements to exclude]\n\n"
            "What to caption:\n"
            "- Trigger word (must be first)\n"
            "- Background setting (to exclude from character learning)\n"
            "- Temporary props or objects (to exclude)\n"
            "- Non-defining clothing items (optional)\n\n"
            "What NOT to caption:\n"
            "- Character's face, hair, or defining physical features\n"
            "- Character's signature outfit or style\n"
            "- Character's unique attributes\n\n"
            "Examples:\n"
            "\"j0hnd0e, office background, holding coffee cup\"\n"
            "\"alicechar, outdoor park setting, wearing glasses\"\n"
            "\"cyb3r_sam, city street, night scene\"\n"
            "\"m4r1a, indoor studio, plain background\"\n\n"
            "Keep it SHORT - the model learns character features automatically."
        ),
        model_type="z-image",
        category="person",
    ),
    CaptionTemplate(
        id="z-image-style-caption",
        name="Z-IMAGE Style LoRA (Caption-Only)",
        description="Neutral descriptions without style keywords - learns pure visual style",
        system_message=(
            "You are creating TRAINING CAPTIONS for Z-IMAGE style LoRA. Describe the subject neutrally "
            "WITHOUT mentioning the style itself. Treat the image as if it's a normal photograph, even if "
            "it's a drawing, painting, or stylized. The model will learn the visual style automatically. "
            "Do NOT use style descriptors like \"cartoon\", \"anime\", \"oil painting\", \"sketch\", etc. "
            "Keep captions simple and factual. Do NOT use markdown."
        ),
        user_prompt=(
            "Describe what you see in the image without mentioning artistic style.\n\n"
            "DO describe:\n"
            "- The subject (person, object, animal, scene)\n"
            "- Actions or poses\n"
            "- Setting or environment\n"
            "- Basic composition\n\n"
            "DO NOT mention:\n"
            "- Artistic style (\"watercolor\", \"anime\", \"3D render\", \"sketch\")\n"
            "- Visual qualities (\"stylized\", \"artistic\", \"illustrated\")\n"
            "- Medium (\"painting\", \"drawing\", \"digital art\")\n"
            "- Art movements or styles (\"impressionist\", \"cyberpunk style\")\n\n"
            "Examples:\n"
            "Wrong: \"A cartoon character standing in a forest\"\n"
            "Right: \"A person standing in a forest\"\n\n"
            "Wrong: \"An oil painting of a vase with flowers\"\n"
            "Right: \"A vase with flowers on a table\"\n\n"
            "Wrong: \"Anime-style girl with pink hair\"\n"
            "Right: \"A woman with pink hair, smiling\"\n\n"
            "Describe it as if it's a regular photograph, even if it clearly isn't. The style will be "
            "learned automatically."
        ),
        model_type="z-image",
        category="general",
    ),
    CaptionTemplate(
        id="z-image-concept-lora",
        name="Z-IMAGE Concept LoRA",
        description="For specific objects/props - associates visual features with text descriptions",
        system_message=(
            "You are creating TRAINING CAPTIONS for Z-IMAGE concept LoRA. Generate captions that describe "
            "the specific object, prop, or concept you want to teach the model. Include a trigger word and "
            "describe the concept's appearance, context, and variations. Keep captions focused but "
            "descriptive (2-4 sentences). This helps the model associate visual features with text "
            "descriptions. Do NOT use markdown."
        ),
        user_prompt=(
            "Generate a caption for this concept/object following this format:\n\n"
            "[trigger_word] [detailed description of the concept]\n\n"
            "Structure:\n"
            "1. Start with a unique trigger word for this concept\n"
            "2. Describe what the object/concept IS\n"
            "3. Include key visual characteristics (color, shape, material, details)\n"
            "4. Mention context or how it's being used (if relevant)\n"
            "5. Note any variations in this specific image\n\n"
            "Examples:\n"
            "\"retro_phone, a vintage rotary telephone with cream-colored plastic casing, round dial with "
            "numbers, sitting on a wooden desk\"\n\n"
            "\"magic_staff, an ornate wooden staff with glowing blue crystal at the top, intricate carved "
            "patterns along the shaft, held by a hand\"\n\n"
            "\"cyber_helmet, futuristic motorcycle helmet with angular design, metallic silver finish, "
            "tinted blue visor, LED accent lights on the sides\"\n\n"
            "Keep focused on the concept itself, not elaborate scene descriptions. The model needs to learn "
            "what THIS specific object/concept looks like."
        ),
        model_type="z-image",
        category="general",
    ),
)

_STYLES_BY_ID: Dict[str, PromptStyle] = {s.id: s for s in PROMPT_STYLES}
_TEMPLATES_BY_ID: Dict[str, CaptionTemplate] = {t.id: t for t in CAPTION_TEMPLATES}


def get_prompt_style(style_id: str) -> PromptStyle:
    try:
        return _STYLES_BY_ID[style_id]
    except KeyError:
        raise UnknownPresetError(f"Unknown prompt style: {style_id}", {"id": style_id}) from None


def default_prompt_style() -> PromptStyle:
    return PROMPT_STYLES[0]


def get_template(template_id: str) -> CaptionTemplate:
    try:
        return _TEMPLATES_BY_ID[template_id]
    except KeyError:
        raise UnknownPresetError(f"Unknown caption template: {template_id}", {"id": template_id}) from None


def templates_by_model(model_type: str) -> List[CaptionTemplate]:
    """Templates for one model type; general-purpose templates are always included."""
    return [t for t in CAPTION_TEMPLATES if t.model_type in (model_type, "general")]


def templates_by_category(category: str) -> List[CaptionTemplate]:
    return [t for t in CAPTION_TEMPLATES if t.category == category]


def available_model_types() -> List[str]:
    seen: List[str] = []
    for t in CAPTION_TEMPLATES:
        if t.model_type not in seen:
            seen.append(t.model_type)
    return seen
