"""Style and resolution presets offered to the UI."""

DEFAULT_SYSTEM_PROMPT = (
    "Generate a high-quality, detailed image based on the user prompt. "
    "Focus on artistic composition, proper lighting, and visual appeal."
)

# ---------------------------------------------------------------------------
# Style presets
# ---------------------------------------------------------------------------

STYLE_PRESETS = {
    "photorealistic": {
        "name": "Photorealistic",
        "description": "High-quality, realistic photography style",
        "system_prompt": "Create a photorealistic, high-quality image with professional lighting and composition. Focus on realistic textures, accurate proportions, and natural colors.",
    },
    "artistic": {
        "name": "Artistic",
        "description": "Creative and expressive artistic style",
        "system_prompt": "Create an artistic interpretation with creative composition, expressive brushwork, and enhanced colors. Focus on artistic expression over photorealism.",
    },
    "digital_art": {
        "name": "Digital Art",
        "description": "Modern digital illustration style",
        "system_prompt": "Create a digital artwork with clean lines, vibrant colors, and modern illustration techniques. Focus on stylized forms and contemporary digital art aesthetics.",
    },
    "cinematic": {
        "name": "Cinematic",
        "description": "Movie-like dramatic lighting and composition",
        "system_prompt": "Create a cinematic image with dramatic lighting, film-like composition, and movie-quality production values. Focus on storytelling through visual elements.",
    },
    "abstract": {
        "name": "Abstract",
        "description": "Non-representational abstract art",
        "system_prompt": "Create an abstract composition focusing on colors, shapes, and forms rather than realistic representation. Emphasize artistic expression and visual impact.",
    },
    "portrait": {
        "name": "Portrait",
        "description": "Close-up portraits with natural skin tones",
        "system_prompt": "Create a high-quality portrait with proper facial features, natural skin tones, and professional lighting. Focus on detail and human characteristics.",
    },
    "landscape": {
        "name": "Landscape",
        "description": "Scenery with depth and atmosphere",
        "system_prompt": "Generate a beautiful landscape with natural scenery, proper perspective, and atmospheric effects. Emphasize depth and environmental details.",
    },
    "fantasy": {
        "name": "Fantasy",
        "description": "Magical and otherworldly scenes",
        "system_prompt": "Create a fantasy scene with magical elements, mythical creatures, and imaginative environments. Focus on creativity and otherworldly atmosphere.",
    },
}

# ---------------------------------------------------------------------------
# Resolution presets
# ---------------------------------------------------------------------------

RESOLUTION_PRESETS = [
    {"label": "Square", "width": 1024, "height": 1024, "aspect_ratio": "1:1"},
    {"label": "Portrait", "width": 768, "height": 1024, "aspect_ratio": "3:4"},
    {"label": "Landscape", "width": 1024, "height": 768, "aspect_ratio": "4:3"},
    {"label": "Wide", "width": 1536, "height": 640, "aspect_ratio": "12:5"},
    {"label": "Tall", "width": 640, "height": 1536, "aspect_ratio": "5:12"},
    {"label": "HD", "width": 1280, "height": 720, "aspect_ratio": "16:9"},
    {"label": "Full HD", "width": 1920, "height": 1080, "aspect_ratio": "16:9"},
]


def system_prompt_for(system_prompt: str | None, style: str | None) -> str:
    """
    Pick the system instruction sent to the provider.

    An explicit system prompt always wins; otherwise a known style preset
    supplies one; otherwise DEFAULT_SYSTEM_PROMPT is used.
    """
    if system_prompt:
        return system_prompt
    preset = STYLE_PRESETS.get(style or "")
    if preset:
        return preset["system_prompt"]
    return DEFAULT_SYSTEM_PROMPT


def list_styles() -> list[dict]:
    return [{"id": style_id, **preset} for style_id, preset in STYLE_PRESETS.items()]
