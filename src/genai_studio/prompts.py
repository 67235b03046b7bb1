"""Instruction texts sent along with user prompts.

These wrap the user's (already English) prompt into the full instruction the
models expect. They are request payload content, not prompt templates for the
end user.
"""

from typing import Optional

INSTRUCTION_LANGUAGES = {"en": "English", "vi": "Vietnamese"}

DEFAULT_SCENE_PROMPT = (
    "A hyperrealistic photo of the subject naturally interacting with the product, "
    "set against a beautiful, complementary background. The focus is on realism and "
    "seamless integration."
)


def translation_instruction(text: str, target_language: str) -> str:
    language = INSTRUCTION_LANGUAGES.get(target_language, target_language)
    return (
        f"Translate the following text to {language}. Return only the translated text, "
        f'without any introductory phrases or quotes. Text to translate: "{text}"'
    )


def elaboration_instruction(base_prompt: str) -> str:
    return (
        "Based on the following idea, generate a detailed, creative, and descriptive "
        "prompt for an AI image generator. The prompt should be in English to maximize "
        f'compatibility with generation models. Idea: "{base_prompt}"'
    )


def scene_instruction(style: Optional[str] = None) -> str:
    base_idea = (
        "A hyperrealistic photo of a person (subject) naturally using or showcasing a product."
    )
    prompt = (
        "Based on the following idea, generate a short, creative, and descriptive prompt "
        "for an AI image generator. Describe a unique and interesting background and mood. "
        'The final prompt should only be about the scene and style, not mentioning "subject" '
        f'or "product". The prompt must be in English. Idea: "{base_idea}"'
    )
    if style:
        prompt += f'\n\nIncorporate this specific style: "{style}"'
    return prompt


VIDEO_FROM_IMAGE_INSTRUCTION = (
    "Analyze the provided image. Based on the visual content, create a detailed, dynamic "
    "prompt in English for an AI video generation model (like VEO). The prompt should "
    "describe a short, looping video scene that brings the image to life. Specify smooth, "
    "cinematic camera movements (like a slow dolly zoom or a gentle pan), ultra-high "
    "resolution, and photorealistic quality. Ensure the prompt requests seamless motion "
    "without any stuttering, aliasing, or artifacts. The prompt should focus on action and "
    "atmosphere, transforming the static image into a living moment. Return only the prompt "
    "itself."
)


def edit_instruction(prompt: str) -> str:
    return (
        "You are an expert photo editor. Your primary instruction is to follow the user's "
        "prompt precisely. A key rule is to **never alter the person in the provided image "
        "unless specifically asked to**. The user wants to add elements around them or change "
        f'the background. User prompt: "{prompt}"'
    )


def subject_product_instruction(prompt: str) -> str:
    return f"""
Analyze the two images provided. The first image contains a subject (e.g., a person, an animal). The second image contains a product (e.g., clothing, an object). Your task is to create a single, new, hyperrealistic photograph that seamlessly combines them in a logical and natural way.

Core Logic:
- If the product is wearable, the subject must be wearing it correctly.
- If the product is an object, the subject should be holding, using, or interacting with it appropriately.
- The final composition must look like a single, professionally shot photograph.

Crucial Constraints & Enhancements:
1.  Preserve Product Integrity: The product from the second image MUST be rendered with 100% accuracy. Do not change its shape, color, texture, details, patterns, or any branding. It must be perfectly recognizable.
2.  Preserve Subject Integrity: The subject from the first image must remain identical. DO NOT alter their facial features, body shape, or defining characteristics.
3.  Hyperrealism & Quality: The output must be an ultra-realistic, professional-grade photograph. Pay extreme attention to matching lighting, shadows, perspective, and scale. The final image must be exceptionally sharp, crisp, high-resolution, and completely free of any digital artifacts or noise.

User's Creative Direction:
- If the following user prompt is not empty, use it for creative guidance regarding the background, mood, or style. If it is empty, create a suitable, aesthetically pleasing background that complements the scene.
- User Prompt: "{prompt}"
"""


def two_people_instruction(prompt: str) -> str:
    return f"""
You are a world-class visual effects and compositing artist. Your task is to analyze two images, each with a person, and create a single, new, hyperrealistic photograph that seamlessly integrates both individuals into a shared, photorealistic scene. The final image must be indistinguishable from a real photograph shot with a high-end camera.

User's Creative Direction:
- The primary creative guidance for the scene, mood, and activity comes from this user prompt: "{prompt}"

Core Objective:
- Place both individuals in the scene described by the user.
- Position them naturally, as if they are interacting or posing together in the same physical space.

Technical & Artistic Integration Mandates (Non-negotiable):
1.  Identity Preservation (100% Accuracy): Both individuals MUST remain identical to their source photos. Do not alter their facial features, body shape, hair, or unique characteristics. They must be perfectly recognizable.
2.  Unified Lighting & Shadow: You MUST establish a single, consistent light source for the entire scene. The lighting (highlights, midtones, shadows) on both individuals must perfectly match each other and the environment. All shadows must be cast from this single light source with matching direction, softness, and intensity. There should be no conflicting lighting cues.
3.  Seamless Color Grading: Apply a uniform color grade across the entire final image. The color temperature, saturation, and contrast on both people must be identical and perfectly blended with the background's color palette.
4.  Cohesive Atmosphere & Depth: Ensure both individuals share the same atmospheric perspective (e.g., haze, fog) and depth of field. If the background is blurred, the focus on both subjects must be consistent.
5.  Perfect Perspective & Scale: The perspective, scale, and eye-lines of both individuals must be perfectly aligned with each other and the environment, creating a believable and coherent 3D space.
6.  Photographic Quality: The final output must be an ultra-realistic, professional-grade photograph. It must be exceptionally sharp, high-resolution, and completely free of digital artifacts, noise, or any signs of manipulation.
"""
