"""Default birthday interview questions."""

from typing import NamedTuple, Optional


class Question(NamedTuple):
    id: str
    text: str
    category: str


DEFAULT_QUESTIONS = [
    Question("q1", "How old are you today?", "basics"),

    Question("q2", "What's your favorite color?", "favorites"),
    Question("q3", "What's your favorite food?", "favorites"),
    Question("q4", "What's your favorite animal?", "favorites"),
    Question("q5", "What's your favorite song or music?", "favorites"),
    Question("q6", "What's your favorite book or story?", "favorites"),
    Question("q7", "What's your favorite thing to do for fun?", "favorites"),
    Question("q8", "What's your favorite movie?", "favorites"),
    Question("q21", "What's your favorite TV show?", "favorites"),
    Question("q22", "What's your favorite restaurant?", "favorites"),

    Question("q9", "Who's your best friend?", "people"),
    Question("q10", "What's your favorite thing to do with your family?", "people"),

    Question("q11", "What do you want to be when you grow up?", "dreams"),
    Question("q12", "If you could have any superpower, what would it be?", "dreams"),
    Question("q13", "If you could go anywhere in the world, where would you go?", "dreams"),
    Question("q14", "What do you wish you could learn how to do?", "dreams"),

    Question("q15", "What's the best thing that happened this year?", "reflections"),
    Question("q16", "What was the funniest thing that happened this year?", "reflections"),
    Question("q17", "What's something you're really proud of?", "reflections"),
    Question("q18", "What's something that makes you happy?", "reflections"),

    Question("q19", "If you could eat one food every day forever, what would it be?", "fun"),
    Question("q20", "What's the silliest thing you can think of?", "fun"),
]

QUESTION_CATEGORIES = {
    "basics": {"label": "The Basics", "emoji": "🎂"},
    "favorites": {"label": "Favorites", "emoji": "⭐"},
    "people": {"label": "Friends & Family", "emoji": "❤️"},
    "dreams": {"label": "Dreams & Wishes", "emoji": "✨"},
    "reflections": {"label": "Looking Back", "emoji": "🪞"},
    "fun": {"label": "Fun & Silly", "emoji": "🎈"},
}


def questions_in_category(category: Optional[str] = None) -> list[Question]:
    if category is None or category == "all":
        return list(DEFAULT_QUESTIONS)
    if category not in QUESTION_CATEGORIES:
        raise ValueError(f"Unknown question category: {category}")
    return [q for q in DEFAULT_QUESTIONS if q.category == category]
