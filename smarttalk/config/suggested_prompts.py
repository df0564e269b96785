# Prompts offered on the empty-chat screen.
# A window of them is served at a time, rotating every 15 minutes.

SUGGESTED_PROMPTS = [
    {"icon": "💡", "text": "Explain quantum computing", "category": "Learn"},
    {"icon": "✍️", "text": "Write a creative story", "category": "Create"},
    {"icon": "🔍", "text": "Help debug my code", "category": "Code"},
    {"icon": "🌍", "text": "Latest AI trends", "category": "Explore"},
    {"icon": "🎨", "text": "Design a landing page", "category": "Design"},
    {"icon": "📊", "text": "Analyze market trends", "category": "Business"},
    {"icon": "🧪", "text": "Chemistry experiment ideas", "category": "Science"},
    {"icon": "🎵", "text": "Compose a song melody", "category": "Music"},
    {"icon": "🏋️", "text": "Create workout plan", "category": "Fitness"},
    {"icon": "🍳", "text": "Healthy meal recipe", "category": "Cooking"},
    {"icon": "📚", "text": "Summarize a book", "category": "Literature"},
    {"icon": "🎮", "text": "Game development tips", "category": "Gaming"},
    {"icon": "🚀", "text": "Startup business ideas", "category": "Business"},
    {"icon": "🧠", "text": "Memory improvement tips", "category": "Learning"},
    {"icon": "📱", "text": "Build a mobile app", "category": "Development"},
    {"icon": "🌱", "text": "Sustainable living tips", "category": "Lifestyle"},
]
