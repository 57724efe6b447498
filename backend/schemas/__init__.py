# schemas/__init__.py

# Re-export corpus models
from .corpus import (
    VocabularyExample,
    VocabularyEntry,
    Exercise,
    Expression,
    ExpressionLesson,
    GlossWord,
    LifestyleTopic,
)

# Re-export analysis / generation models
from .analysis import (
    DIFFICULTIES,
    ExtractedWord,
    SituationAnalysis,
    GeneratedExample,
    DialogueTurn,
    Scenario,
    Stage1Result,
    Stage2Result,
    SampleData,
    AnalysisResult,
    SituationExamplesResult,
)


__all__ = [
    # corpus
    "VocabularyExample",
    "VocabularyEntry",
    "Exercise",
    "Expression",
    "ExpressionLesson",
    "GlossWord",
    "LifestyleTopic",

    # analysis
    "DIFFICULTIES",
    "ExtractedWord",
    "SituationAnalysis",
    "GeneratedExample",
    "DialogueTurn",
    "Scenario",
    "Stage1Result",
    "Stage2Result",
    "SampleData",
    "AnalysisResult",
    "SituationExamplesResult",
]
