"""
Typing lesson library served by /api/typing/lessons.

Lessons are addressed as "<category>-<index>", e.g. "beginner-0".
"""
from typing import Dict, List, Optional

TYPING_LESSONS: Dict[str, List[dict]] = {
    "beginner": [
        {
            "title": "Home Row - Left Hand",
            "content": "asdf asdf asdf fads fdsa afsd asfd fads asdf sfda afds asfd dafa sasa fdfd asas dfdf",
        },
        {
            "title": "Home Row - Right Hand",
            "content": "jkl; jkl; ;lkj ;lkj lkjl jlkj kljl ljkl jkl; ;lkj jkl; ;kll jkjk lljj ;lkj",
        },
        {
            "title": "Home Row - Both Hands",
            "content": "asdf jkl; asdf jkl; fjdk slak fjas djsl askf jdsl fjak slfd jsak dlas fksl asdfjkl;",
        },
        {
            "title": "Top Row Practice",
            "content": "qwer tyui op qwer tyui qwer wret tyui rewt iuyt trwq uiop rtew yuio poit qwer",
        },
        {
            "title": "Bottom Row Practice",
            "content": "zxcv bnm zxcv bnm vcxz mnb zxcv bnmz cvbn mzxc bnmz xcvm bnzx mncv zxbn",
        },
    ],
    "intermediate": [
        {
            "title": "Common 3-Letter Words",
            "content": "the and for are but not you all can she was use one her his had from say each did",
        },
        {
            "title": "Common 4-Letter Words",
            "content": "that with have this will your from they know want been good much some time very when come",
        },
        {
            "title": "Mixed Common Words",
            "content": "about which their there first would these things think could people other how then she was make",
        },
        {
            "title": "Tech Vocabulary",
            "content": "data code file base type class list sort find array push pull merge build serve route update",
        },
        {
            "title": "Finance Vocabulary",
            "content": "audit debit credit profit margin account ledger budget capital revenue expense balance equity asset value",
        },
    ],
    "advanced": [
        {
            "title": "Short Paragraph",
            "content": "The quick brown fox jumps over the lazy dog. Pack my box with five dozen liquor jugs. "
                       "How vexingly quick daft zebras jump.",
        },
        {
            "title": "Finance Concepts",
            "content": "Financial accounting is the process of recording, summarizing, and reporting a company's "
                       "financial transactions. The balance sheet, income statement, and cash flow statement are "
                       "the three primary financial statements.",
        },
        {
            "title": "Technology Concepts",
            "content": "React is a JavaScript library for building user interfaces. It allows developers to create "
                       "reusable UI components and efficiently update the DOM when data changes. State management "
                       "is a key concept in React development.",
        },
        {
            "title": "Professional Writing",
            "content": "Effective communication is essential in professional environments. Clear and concise "
                       "writing helps convey ideas accurately. Proper punctuation, grammar, and sentence structure "
                       "contribute to readable and professional documents.",
        },
        {
            "title": "Speed Challenge",
            "content": "To be or not to be that is the question whether tis nobler in the mind to suffer the slings "
                       "and arrows of outrageous fortune or to take arms against a sea of troubles and by opposing "
                       "end them.",
        },
    ],
}


def list_lessons() -> List[dict]:
    """Flatten the library into [{id, category, title, content}, ...]."""
    return [
        {"id": f"{category}-{index}", "category": category, **lesson}
        for category, lessons in TYPING_LESSONS.items()
        for index, lesson in enumerate(lessons)
    ]


def get_lesson(lesson_id: str) -> Optional[dict]:
    category, _, index = lesson_id.rpartition("-")
    lessons = TYPING_LESSONS.get(category)
    if not lessons or not index.isdigit() or int(index) >= len(lessons):
        return None
    return {"id": lesson_id, "category": category, **lessons[int(index)]}
