"""
Annotation prompt and response schema.

Each prompt is a function that takes context and returns a formatted string.
This keeps prompts testable and versionable.
"""

# ============================================================
# Annotation Prompt
# ============================================================

def annotation_prompt(url: str) -> str:
    """Ask for a category, three tags and a five-word summary of a URL."""
    return f"""Analyze this URL string: "{url}".
I need you to categorize it, generate 3 relevant tags, and a very short 5-word summary of what this website likely contains based on the domain and path."""


# ============================================================
# Response Schema (Gemini OpenAPI subset)
# ============================================================

ANNOTATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "tags": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3 relevant tags for the link",
        },
        "summary": {
            "type": "STRING",
            "description": "A short 5-word summary",
        },
        "category": {
            "type": "STRING",
            "description": "General category (e.g. Social, Tech, Shopping)",
        },
    },
    "required": ["tags", "summary", "category"],
}
