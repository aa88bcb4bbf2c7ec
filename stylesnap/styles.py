"""Built-in style catalog for the image-to-image model"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional


def _normalize(prompt: str) -> str:
    return re.sub(r"\s+", " ", prompt).strip()


@dataclass(frozen=True)
class ImageStyle:
    id: str
    title: str
    category: str
    image_url: str
    style_prompt: str


STYLES: List[ImageStyle] = [
    ImageStyle(
        id="1980s-pop-art",
        title="1980s Pop Art",
        category="Pop Art",
        image_url="/1980s-pop-art.png",
        style_prompt=_normalize("""
            Create a vibrant 1980s pop art portrait inspired by Roy Lichtenstein and Andy Warhol.
            Use bold primary colors, halftone dots, thick black outlines, and strong contrast.
            Stylize facial features but keep them recognizable and energetic.
            High-resolution, sharp, and visually striking.
            Negative Prompt: blurry, low quality, distorted, extra limbs, watermark, text, signature, logo, duplicate, mutation.
        """),
    ),
    ImageStyle(
        id="anime-art",
        title="Anime Art",
        category="Anime",
        image_url="/anime-art.png",
        style_prompt=_normalize("""
            Transform the photo into a polished anime illustration inspired by Makoto Shinkai.
            Use clean lines, expressive eyes, smooth skin, and soft shading.
            Add vibrant colors and cinematic lighting for a hand-drawn anime look.
            Crisp, detailed, and appealing.
            Negative Prompt: blurry, low quality, distorted, extra limbs, watermark, text, signature, logo, duplicate, mutation.
        """),
    ),
    ImageStyle(
        id="disney-art",
        title="Disney Art",
        category="Disney",
        image_url="/disney-art.png",
        style_prompt=_normalize("""
            Convert the image to a classic Disney animation style.
            Use soft features, bright warm colors, painterly shading, and expressive eyes.
            Add a storybook background with gentle lighting and a magical feel.
            High-resolution and family-friendly.
            Negative Prompt: blurry, low quality, distorted, extra limbs, watermark, text, signature, logo, duplicate, mutation.
        """),
    ),
    ImageStyle(
        id="ghibli-art",
        title="Ghibli Art",
        category="Ghibli",
        image_url="/ghibli-art.png",
        style_prompt=_normalize("""
            Render the photo in Studio Ghibli style, inspired by Spirited Away and Howl's Moving Castle.
            Use hand-painted backgrounds, soft pastel colors, and a warm glow.
            Characters should have gentle expressions and clean outlines.
            Dreamy, high-quality, and charming.
            Negative Prompt: blurry, low quality, distorted, extra limbs, watermark, text, signature, logo, duplicate, mutation.
        """),
    ),
    ImageStyle(
        id="pop-surrealism",
        title="Pop Surrealism",
        category="Pop Surrealism",
        image_url="/pop-surrealism.png",
        style_prompt=_normalize("""
            Create a dreamlike pop surrealism portrait blending whimsical characters, neon accents,
            and playful absurdity. Vibrant, imaginative, and emotionally surreal.
            Negative Prompt: blurry, low quality, blurry textures, watermark.
        """),
    ),
    ImageStyle(
        id="hyperreal-robots",
        title="Hyperreal Futuristic Robots",
        category="Futuristic & Sci-Fi",
        image_url="/retro-robots.png",
        style_prompt=_normalize("""
            Create a hyper-realistic portrait of futuristic robots with intricate mechanical details,
            advanced technology, and lifelike metallic textures. Use dramatic lighting, sharp focus,
            and a cinematic atmosphere. The scene should feel cutting-edge and visually stunning,
            with a sense of realism and depth.
            Negative Prompt: cartoonish, low quality, blurry, watermark, text, logo, extra limbs, distortion.
        """),
    ),
    ImageStyle(
        id="textured-portrait",
        title="Textured Illustrated Portrait",
        category="Mixed Media / Collage",
        image_url="/textured-portrait.png",
        style_prompt=_normalize("""
            Generate a stylized portrait with layered textures, hand-drawn strokes,
            collage feel with vintage paper or fabric textures.
            Warm, tactile, artistic.
            Negative Prompt: flat color, low detail, glitch, watermark.
        """),
    ),
]

_BY_ID: Dict[str, ImageStyle] = {style.id: style for style in STYLES}


def get_style(style_id: Optional[str]) -> Optional[ImageStyle]:
    if not style_id:
        return None
    return _BY_ID.get(style_id)
