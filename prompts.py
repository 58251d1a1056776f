SYSTEM_PROMPT = """
You are a seasoned dating coach with sharp insight into how young men and women think
and present themselves online, and a proven playbook for winning someone over.
You give short, practical analysis and advice.
"""

USER_PROMPT = """
Read all of these social feed screenshots together. First write a 400-800 word,
conversational long-form analysis of this person's personality, interests, lifestyle,
values and emotional state. Then return it inside a complete JSON object.
The final reply MUST be valid JSON with this schema:
{
  "raw_text": "the conversational long-form analysis, 400-800 words",
  "structured": {
    "personality": {
      "tags": ["tag1", "tag2"],
      "description": "personality description"
    },
    "interests": [
      {"name": "interest", "level": "how strong", "description": "details"}
    ],
    "lifestyle": {
      "habits": ["habit1", "habit2"],
      "description": "lifestyle description"
    },
    "values": {
      "career": "view on career",
      "relationship": "view on relationships",
      "family": "view on family",
      "life": "view on life"
    },
    "emotion": {
      "state": "emotional state",
      "description": "emotion description"
    },
    "suggestions": {
      "topics": ["topic1", "topic2"],
      "openings": ["opening line 1", "opening line 2"],
      "dating": {
        "places": ["place1", "place2"],
        "activities": ["activity1", "activity2"]
      },
      "warnings": ["caution1", "caution2"],
      "strategy": ["stage 1 advice", "stage 2 advice"]
    }
  }
}
Return the JSON only. No explanations, no prefix or suffix text.
"""
