# ABOUTME: Prompt templates for Gemini briefing generation.
# ABOUTME: Story summaries, bucket headlines and scripts, and the full daily script.

EDITOR_SYSTEM_PROMPT = """You are the senior editor of Morning Brief, a daily audio news briefing on
geopolitics, the economy, defense and technology. You write for the ear: short sentences, plain
words, no markdown, no bullet points, no emojis. You are factual and neutral, and you never invent
facts that are not in the material provided."""

STORY_SUMMARIES_PROMPT = """Summarize each news story in 2-3 sentences. Be factual, engaging and concise.

ARTICLES:
{articles}

Return JSON array:
[{{"index": 1, "title": "Compelling headline (max 80 chars)", "summary": "2-3 sentence summary with key facts and context"}}]

Return ONLY valid JSON."""

CATEGORY_HEADLINE_PROMPT = """Based on these {display_name} news stories, create a compelling headline.

STORIES:
{stories}

REQUIREMENTS:
- Maximum 50 characters
- Focus on the biggest story
- News style (CNN, BBC)
- No quotes

Return ONLY the headline text."""

CATEGORY_SCRIPT_PROMPT = """Write a 1-2 MINUTE audio briefing script for {display_name} news.

STORIES:
{stories}

REQUIREMENTS:
1. Opening (5 sec): "Here's your {display_name} update."
2. Cover {story_count} stories with 2-3 sentences each
3. Closing (5 sec): "That's your {display_name} brief."
4. Total: 600-1000 characters (1-2 minutes)
5. Conversational, professional tone

Return ONLY the script text."""

FULL_HEADLINE_PROMPT = """Based on today's top news across all categories, create ONE main headline.

CATEGORY HEADLINES:
{headlines}

Requirements: Max 60 chars, punchy, captures the day's biggest story.
Return ONLY the headline."""

FULL_SCRIPT_PROMPT = """Write a 5-MINUTE comprehensive news briefing script.

DATE: {today}

NEWS BY CATEGORY:
{categories}

REQUIREMENTS:
1. Opening (15 sec): "Good morning. It's {today}. Here's your Morning Brief with today's top stories from around the world."

2. Cover EACH category with a section:
   - Use transitions: "Turning to...", "In...", "Meanwhile in...", "On the economic front...", "In tech news..."
   - 2-3 sentences per major story
   - Cover 2-3 stories per category

3. Closing (15 sec): "That's your Morning Brief for {today}. Check our app for individual category briefs if you want to dive deeper into any topic. Stay informed, and have a great day."

4. Total: 2800-3500 characters (5 minutes of audio)
5. Professional, authoritative tone (NPR/BBC style)
6. Say "United States" not "US", spell out abbreviations

Return ONLY the script text."""
