"""Prompt templates for LLM interactions."""

from __future__ import annotations

SUMMARY_SYSTEM_PROMPT = (
    "You are a travel content summarizer. Create concise, actionable summaries that help "
    "travelers make decisions."
)

ACTIVITY_EXTRACTION_SYSTEM_PROMPT = (
    "You are a travel activity extractor. Extract specific, actionable activities from travel "
    "posts. Return valid JSON only."
)

ACTIVITY_GENERATION_SYSTEM_PROMPT = """You are a travel expert that recommends specific, actionable
activities.
Your recommendations should be based on deep knowledge of destinations, popular attractions, and
traveler preferences.
Always provide detailed, practical information that helps travelers make decisions.
Return valid JSON only."""

DETAIL_CARD_SYSTEM_PROMPT = """You are a travel recommendation expert. Generate a detailed
information card about a specific activity/attraction.

Output ONLY valid JSON matching this exact structure:
{
  "summary": "2-3 sentence engaging description",
  "detailedDescription": "1-2 paragraph detailed description with practical tips",
  "quotes": [
    { "original": "Quote in the source language", "translated": "English translation" }
  ],
  "photoQuery": "Photo search query for relevant photos",
  "duration": "Recommended duration (e.g., '2 hours', '1 day')",
  "bestTime": "Best time to visit (e.g., 'Sunset', 'Morning', 'Weekdays')",
  "location": "Specific location/address if mentioned in content"
}

Guidelines:
- Be enthusiastic and inspiring
- Include practical tips (best time, duration, how to get there)
- Use quotes from the content if available (max 2)
- If no non-English content is available, leave the quotes array empty
- Make the photo query specific and descriptive"""

QUERY_SUGGESTION_SYSTEM_PROMPT = """You are a travel expert who suggests activities based on
itinerary context.
Analyze the trip and suggest {limit} specific, actionable activities that complement the existing
itinerary.
Return ONLY activity search queries (one per line) that will be used to find real user-generated
content.

Example output:
traditional food tour Lima Peru
sunset viewing Lima Miraflores
local market shopping Lima"""


def get_summary_prompt(title: str, body: str, source_language: str) -> str:
    """Generate the prompt for summarizing one post."""
    if source_language == "zh":
        instruction = (
            "Translate and summarize this Chinese travel content in 2-3 concise English "
            "sentences highlighting key insights and recommendations:"
        )
    else:
        instruction = (
            "Summarize this travel content in 2-3 concise sentences highlighting key insights "
            "and recommendations:"
        )
    return f"{instruction}\n\nTitle: {title}\n\nContent: {body}"


def get_activity_extraction_prompt(title: str, body: str, platform: str, destination: str) -> str:
    """Generate the prompt for extracting activities from one post."""
    return f"""Extract 1-2 SPECIFIC, ACTIONABLE activities from this {platform} post about
{destination}.

Post Title: {title}
Post Content: {body}

Requirements:
1. Extract SPECIFIC activities (e.g., "Visit Shibuya Crossing at night" not "Explore Tokyo")
2. Include location details if mentioned
3. Generate good photo search keywords (place name + city + country + descriptive words)
4. Focus on activities that would interest travelers
5. Skip generic advice or non-actionable content
6. Write a detailed, appealing description (1-2 paragraphs)

Return a JSON array of activities:
[
  {{
    "activityName": "Visit Shibuya Crossing",
    "activityType": "sightseeing",
    "description": "Experience the world's busiest pedestrian crossing with neon lights",
    "detailedDescription": "Shibuya Crossing is Tokyo's most iconic intersection...",
    "photoKeywords": "Shibuya Crossing Tokyo Japan nighttime crowds neon",
    "location": "Shibuya, Tokyo",
    "estimatedDuration": "30 minutes",
    "bestTimeToVisit": "evening",
    "tips": "Best views from the second-floor cafe overlooking the crossing"
  }}
]

Return an empty array [] if no specific activities are found."""


def get_activity_generation_prompt(destination: str, activity_type: str) -> str:
    """Generate the prompt for the LLM acting as a content source."""
    focus = (
        f"Focus on: {activity_type}"
        if activity_type
        else "Provide diverse activities (sightseeing, food, culture, etc.)"
    )
    return f"""Generate 3 top activity recommendations for travelers visiting {destination}.

{focus}

Requirements:
1. Recommend SPECIFIC activities with exact names (e.g., "Visit Colosseum" not "explore ancient
sites")
2. Include practical details: location, duration, best time to visit
3. Provide insider tips that add value
4. Make descriptions engaging and inspiring
5. Each activity should be distinct and worthwhile

Return JSON in this exact format:
{{
  "activities": [
    {{
      "title": "Visit the Colosseum",
      "location": "Piazza del Colosseo, Rome, Italy",
      "description": "Explore the iconic ancient amphitheater where gladiators once fought",
      "detailedDescription": "The Colosseum stands as Rome's most impressive monument...",
      "duration": "2-3 hours",
      "bestTime": "early morning or late afternoon",
      "tags": ["history", "architecture", "must-see"],
      "tips": ["Book tickets online in advance to skip long queues"],
      "photoKeywords": "Colosseum Rome Italy ancient amphitheater sunset"
    }}
  ]
}}"""


def get_detail_card_prompt(
    title: str, destination: str, item_type: str, description: str, content_summary: str
) -> str:
    """Generate the prompt for synthesizing one activity detail card."""
    return f"""Activity: {title}
Location: {destination}
Type: {item_type}
Current Description: {description}

Content from travel platforms:
{content_summary or "No specific content found for this activity."}

Generate a detailed, engaging information card for this activity."""
