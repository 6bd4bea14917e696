"""
lexicon.py

Static word tables used by the text pipeline of doctopictree.

All tables are immutable (frozensets / tuples) and bundled into a frozen
:class:`Lexicon` so that TextPreprocessor, TermExtractor, ClusterLabeler and
the lightweight summarizer receive them at construction time instead of
reading process-wide mutable globals.

Ordering matters for the tuple-valued tables: document-type patterns and
domain categories are checked in declaration order, and the first match wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


STOPWORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "can", "this", "that", "these", "those",
        "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "us", "them", "my", "your",
        "his", "its", "our", "their", "from", "up", "out", "down", "off", "over", "under", "again",
        "further", "then", "once", "here", "there", "when", "where", "why", "how", "all", "any",
        "both", "each", "few", "more", "most", "other", "some", "such", "no", "nor", "not", "only",
        "own", "same", "so", "than", "too", "very", "just", "now", "also", "time", "way",
        # extra function words that slip through the length filter
        "into", "about", "which", "while", "what", "whom", "whose", "upon", "within", "without",
        "between", "through", "during", "before", "after", "above", "below", "because", "however",
        "therefore", "thus", "although", "though", "unless", "until", "whether", "among",
    }
)

# PDF artifacts, encoding names and document-structure boilerplate that
# leak into extracted text and say nothing about its topic.
METADATA_DENYLIST: FrozenSet[str] = frozenset(
    {
        "pdf", "obj", "endobj", "stream", "endstream", "xref", "trailer", "startxref",
        "flatedecode", "filter", "length", "mediabox", "cropbox", "resources", "procset",
        "fontdescriptor", "basefont", "subtype", "type", "font", "xobject", "catalog",
        "producer", "creator", "creationdate", "moddate", "metadata", "xmp", "rdf",
        "utf", "ascii", "latin", "unicode", "encoding", "winansiencoding", "identity",
        "page", "pages", "abstract", "introduction", "conclusion", "conclusions",
        "references", "bibliography", "acknowledgments", "acknowledgements", "appendix",
        "table", "figure", "fig", "contents", "index", "copyright", "rights", "reserved",
        "doi", "isbn", "issn", "http", "https", "www", "com", "org",
    }
)

# Short tokens that survive the minimum-length pass.
SHORT_WORD_WHITELIST: FrozenSet[str] = frozenset(
    {"the", "and", "for", "but", "not", "all", "new", "use", "web", "api", "ai", "ml", "ui", "os", "io"}
)

# Suffixes that mark abstract / technical nouns and adjectives.
HIGH_VALUE_SUFFIX_PATTERN: str = (
    r"(tion|sion|ment|ness|ity|ology|ism|ics|ence|ance|ure|ive|ical|ship|"
    r"graphy|metry|ware|ing|ize|ise|ist|ogy|ory|ery|ency|ancy)s?$"
)

DOMAIN_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "algorithm", "architecture", "blockchain", "brain", "business", "cell", "chemistry",
        "climate", "cloud", "code", "cognitive", "compiler", "computer", "data", "database",
        "deep", "design", "detection", "disease", "economy", "energy", "engineering",
        "finance", "framework", "gene", "graph", "hardware", "health", "kernel", "language",
        "law", "learning", "legal", "machine", "market", "math", "medical", "memory", "model",
        "molecule", "network", "neural", "neuron", "patient", "physics", "policy", "protein",
        "protocol", "quantum", "qubit", "robot", "science", "security", "sensor", "server",
        "software", "space", "statistics", "strategy", "system", "theory", "therapy", "vector",
    }
)

# Boosted by keyword scoring and by the lightweight summarizer.
TECHNICAL_TERMS: Tuple[str, ...] = (
    "neural", "machine", "deep", "algorithm", "optimization", "learning",
    "network", "model", "classification", "regression", "clustering",
    "detection", "prediction", "framework", "architecture", "protocol",
    "implementation", "performance", "scalability", "distributed", "system",
)

SUMMARY_KEYWORDS: Tuple[str, ...] = (
    "algorithm", "framework", "architecture", "protocol", "implementation",
    "design", "optimization", "neural", "machine", "deep", "distributed",
    "quantum", "blockchain", "security", "encryption", "database", "network",
    "software", "hardware", "system", "performance", "scalability", "model",
    "classification", "regression", "clustering", "detection", "prediction",
)

# Generic academic words that appear everywhere.
GENERIC_TERMS: Tuple[str, ...] = (
    "research", "study", "analysis", "paper", "work", "approach", "method",
)

SUMMARY_GENERIC_TERMS: Tuple[str, ...] = (
    "research", "study", "analysis", "paper", "work", "investigation",
)

DOCUMENT_TYPE_PATTERNS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Literature Review", ("review", "survey", "literature", "systematic review", "meta-analysis")),
    ("Tutorial", ("tutorial", "guide", "how to", "step by step", "introduction to", "getting started")),
    ("Case Study", ("case study", "case analysis", "real world", "practical application", "implementation")),
    ("Technical Report", ("report", "technical report", "findings", "results", "evaluation")),
    ("Methodology", ("methodology", "approach", "method", "technique", "procedure", "framework")),
    ("Analysis", ("analysis", "examination", "investigation", "assessment", "evaluation")),
    ("Comparison", ("comparison", "comparative", "versus", "benchmarking", "performance comparison")),
    ("Proposal", ("proposal", "we propose", "new approach", "novel method", "contribution")),
    ("Experimental Study", ("experiment", "empirical", "experimental", "testing", "validation")),
)

# Suffix used when two keywords name a document or cluster.
PAIR_LABEL_SUFFIXES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Methods", ("algorithm", "method")),
    ("Systems", ("system", "platform")),
    ("Theory", ("theory", "theoretical")),
    ("Applications", ("application", "practical")),
    ("Design", ("design", "development")),
    ("Optimization", ("optimization", "improvement")),
)
PAIR_LABEL_DEFAULT_SUFFIX: str = "Study"

# Suffix used when a single keyword names an outlier document.
SINGLE_LABEL_SUFFIXES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Research", ("research", "investigation")),
    ("Development", ("development", "implementation")),
    ("Analysis", ("analysis", "examination")),
    ("Design", ("design", "architecture")),
)
SINGLE_LABEL_DEFAULT_SUFFIX: str = "Study"

DOMAIN_CATEGORIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Business Document", ("business", "management", "strategy")),
    ("Legal Document", ("legal", "law", "regulation")),
    ("Medical Document", ("medical", "health", "clinical")),
    ("Educational Material", ("education", "learning", "teaching")),
    ("Technical Documentation", ("technical", "engineering", "specification")),
    ("Policy Document", ("policy", "guideline", "standard")),
    ("Instructional Document", ("manual", "instruction", "procedure")),
)

SUMMARY_METHOD_PATTERN: str = r"\b(using|based on|we propose|we present|our approach)\b"

TOPIC_COLORS: Tuple[str, ...] = (
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#06b6d4", "#84cc16", "#f97316",
)
OUTLIER_COLOR: str = "#6b7280"


@dataclass(frozen=True)
class Lexicon:
    """
    Immutable bundle of the word tables above.

    Build a customised lexicon with :func:`dataclasses.replace`, e.g.::

        from dataclasses import replace
        lex = replace(DEFAULT_LEXICON, stopwords=DEFAULT_LEXICON.stopwords | {"lorem"})
    """

    stopwords: FrozenSet[str] = STOPWORDS
    metadata_denylist: FrozenSet[str] = METADATA_DENYLIST
    short_word_whitelist: FrozenSet[str] = SHORT_WORD_WHITELIST
    high_value_suffix_pattern: str = HIGH_VALUE_SUFFIX_PATTERN
    domain_keywords: FrozenSet[str] = DOMAIN_KEYWORDS
    technical_terms: Tuple[str, ...] = TECHNICAL_TERMS
    generic_terms: Tuple[str, ...] = GENERIC_TERMS
    summary_keywords: Tuple[str, ...] = SUMMARY_KEYWORDS
    summary_generic_terms: Tuple[str, ...] = SUMMARY_GENERIC_TERMS
    summary_method_pattern: str = SUMMARY_METHOD_PATTERN
    document_type_patterns: Tuple[Tuple[str, Tuple[str, ...]], ...] = DOCUMENT_TYPE_PATTERNS
    pair_label_suffixes: Tuple[Tuple[str, Tuple[str, ...]], ...] = PAIR_LABEL_SUFFIXES
    pair_label_default_suffix: str = PAIR_LABEL_DEFAULT_SUFFIX
    single_label_suffixes: Tuple[Tuple[str, Tuple[str, ...]], ...] = SINGLE_LABEL_SUFFIXES
    single_label_default_suffix: str = SINGLE_LABEL_DEFAULT_SUFFIX
    domain_categories: Tuple[Tuple[str, Tuple[str, ...]], ...] = DOMAIN_CATEGORIES
    topic_colors: Tuple[str, ...] = field(default=TOPIC_COLORS)
    outlier_color: str = OUTLIER_COLOR


DEFAULT_LEXICON = Lexicon()
