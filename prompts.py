from typing import List, NamedTuple

SYSTEM_PROMPT = """You are an expert educational quiz generator. Your task is to create high-quality quiz questions from Wikipedia article content.

CRITICAL RULES:
1. Generate EXACTLY what is requested - no more, no less
2. Base ALL questions strictly on the provided article content - NO external knowledge, NO fabrication
3. Ensure questions test factual knowledge from the article
4. Create a balanced mix of difficulty levels
5. Each question must have EXACTLY 4 distinct options with only ONE correct answer
6. Explanations should reference which part of the article contains the answer"""

USER_PROMPT_TEMPLATE = """Analyze this Wikipedia article about "{title}" and generate a comprehensive quiz.

ARTICLE CONTENT:
{article_text}

ARTICLE SECTIONS:
{sections}

JSON SCHEMA (return ONLY this, nothing else):
{{
  "summary": "A 2-3 sentence summary of the article",
  "key_entities": {{
    "people": ["important people mentioned"],
    "organizations": ["organizations mentioned"],
    "locations": ["locations mentioned"]
  }},
  "quiz": [
    {{
      "question": "Clear, specific question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "answer": "The correct option (must match one option exactly)",
      "difficulty": "easy" | "medium" | "hard",
      "explanation": "Brief explanation referencing the article section"
    }}
  ],
  "related_topics": ["5-7 related Wikipedia topics for further reading"]
}}

Generate {min_questions}-{max_questions} questions with this distribution:
- 2-3 easy questions (basic facts, names, dates)
- 4-5 medium questions (relationships, causes, effects)
- 2-3 hard questions (analysis, comparisons, implications)

IMPORTANT: Return ONLY valid JSON, no markdown formatting, no code fences, no extra text."""

MIN_QUESTIONS = 8
MAX_QUESTIONS = 10


class Prompt(NamedTuple):
    system: str
    user: str


def build_prompt(article_text: str, title: str, sections: List[str]) -> Prompt:
    user = USER_PROMPT_TEMPLATE.format(
        title=title,
        article_text=article_text,
        sections=", ".join(sections),
        min_questions=MIN_QUESTIONS,
        max_questions=MAX_QUESTIONS,
    )
    return Prompt(SYSTEM_PROMPT, user)
