"""All magic values live here — no inline literals anywhere else."""

# Image validation
IMAGE_MIME_PREFIX = "image/"
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MSG_NOT_AN_IMAGE = "Only image files can be uploaded."
MSG_TOO_LARGE = "Images must be 5 MB or smaller."

# Response parsing: markers a text model wraps JSON in
FENCE_MARKERS = ("```json", "```")

# History cache
HISTORY_STORAGE_KEY = "exam_tutor_history"
HISTORY_MAX_ITEMS = 5
HISTORY_ID_SUFFIX_LENGTH = 7
DEFAULT_HISTORY_DIR = ".exam_tutor"
MSG_QUOTA_RETRY = "Storage quota exceeded with %d items, retrying with %d"
MSG_QUOTA_GIVE_UP = "Cannot save history item, storage full"
MSG_HISTORY_CORRUPT = "History load failed: %s, starting fresh"
MSG_PERSIST_FAILED = "History storage unavailable: %s"

# Analysis backends
CLAUDE_ANALYSIS_MODEL = "claude-opus-4-6"
OPENAI_ANALYSIS_MODEL = "gpt-4o"
ANALYSIS_MAX_TOKENS = 8192
MSG_DEFAULT_QUERY = "Analyze this exam question."

# Orchestrator
MSG_ANALYSIS_FAILED = "Analysis failed. Please try again in a moment."
MSG_TRANSPORT_FAILED = "Analysis request failed: %s"
MSG_MALFORMED_RESPONSE = "Could not decode analysis response: %s\nRaw text: %s"
MSG_ANALYZE_IGNORED = "Analyze ignored: %s"
MSG_HISTORY_UNREADABLE = "History entry %s has an unreadable image: %s"

# CLI
MSG_ANALYZING = "Analyzing %s…"
MSG_HISTORY_EMPTY = "No history yet — analyze an image first."
MSG_HISTORY_NOT_FOUND = "No history entry with id %s"
MSG_HISTORY_DELETED = "Deleted %s"
MSG_FILE_NOT_FOUND = "File not found: %s"
MSG_PRACTICE_EMPTY = "This analysis has no practice problems."
MSG_PRACTICE_PROBLEM = "[bold]%s[/bold]\n%s\n[dim]%s[/dim]\n"
MSG_FACT_CHECK = "%d. %s"
MSG_FACT_CHECK_RESULT = "%d. %s — %s"
MSG_FACT_CHECK_CORRECT = "correct"
MSG_FACT_CHECK_WRONG = "incorrect"
MSG_FACT_CHECK_SKIPPED = "No fact-check question %d"
PRACTICE_TRUE_WORDS = ("true", "t", "o", "yes", "y")
PRACTICE_FALSE_WORDS = ("false", "f", "x", "no", "n")

ANALYSIS_INSTRUCTION = """\
You are an exam preparation tutor. The user uploads an image of a past exam
question. Reason through it the way a strong candidate would, then write a
precise analysis report in three parts.

Return JSON only, with exactly this shape (a fenced code block is tolerated):

{
  "singleQuestionAnalysis": {
    "evaluationArea": "syllabus area and content element being assessed",
    "trapNotice": "the most common misconception or trap (one sentence)",
    "evidenceMapping": [{"cue": "key cue in the question", "interpretation": "what it signals and why"}],
    "strategy": [{"step": "Step 1", "title": "short title", "description": "what to do and why"}],
    "optionsReview": [{"option": "option text", "isCorrect": true, "reason": "why", "errorType": "typical error"}],
    "finalAnswer": {"answer": "final answer or model answer", "confidenceReason": "one line"},
    "studyGuide": {"rote": ["facts to memorize"], "nonRote": ["principles to understand"]},
    "transferTips": ["reusable rules for related questions"],
    "checklist": ["exam-day checks that prevent mistakes"]
  },
  "conceptHistoricalAnalysis": {
    "coreConcept": {"title": "core concept", "description": "definition and explanation"},
    "historicalTrend": "how this concept has been examined over the years",
    "pastExamples": [{"year": "year and level", "questionText": "core question", "keyPoint": "intent"}],
    "futurePrediction": {
      "introduction": "outlook",
      "predictions": [{"theme": "theme", "prediction": "expected form", "studyGuide": "how to prepare"}]
    },
    "summaryTable": [{"period": "period", "questionStyle": "style", "keyFocus": "focus"}]
  },
  "practiceProblems": {
    "variation": {"title": "variation", "question": "question", "instructions": "how to answer"},
    "nextStep": {"title": "next step", "question": "question", "instructions": "how to answer"},
    "factCheck": [{"question": "true/false statement", "answer": true, "explanation": "why"}]
  }
}
"""
