"""
Keyword-based topic tagging for ingested items.

Topics are detected from the title and summary. Matching is plain substring
containment on the lower-cased text, so short keywords such as "rl" or "rag"
also match inside longer words ("world", "storage").
"""

from typing import List, Optional, Tuple

# (label, keywords), evaluated in this order
TOPIC_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("LLM", (
        "llm",
        "large language model",
        "gpt",
        "transformer",
        "bert",
        "t5",
        "llama",
        "claude",
        "chatgpt",
        "prompt engineering",
    )),
    ("RL", (
        "reinforcement learning",
        "rl",
        "rlhf",
        "reward model",
        "policy gradient",
        "q-learning",
        "dpo",
    )),
    ("Multimodal", (
        "multimodal",
        "vision",
        "image",
        "video",
        "dall-e",
        "clip",
        "visual",
        "ocr",
        "object detection",
    )),
    ("Systems", (
        "infrastructure",
        "mlops",
        "systems",
        "deployment",
        "production",
        "scalability",
        "distributed",
        "gpu",
        "vram",
        "quantization",
        "inference",
        "serving",
    )),
    ("Alignment", (
        "alignment",
        "safety",
        "ethics",
        "fairness",
        "bias",
        "hallucination",
        "interpretability",
        "explainability",
        "responsible ai",
        "agi",
    )),
    ("Agents", (
        "agent",
        "autonomous",
        "robotics",
        "automation",
        "action planning",
        "tool use",
        "function calling",
    )),
    ("Finance", (
        "finance",
        "trading",
        "market",
        "stock",
        "portfolio",
        "investment",
        "risk",
        "quant",
        "algorithmic",
    )),
    ("Open Source", (
        "open source",
        "hugging face",
        "pytorch",
        "tensorflow",
        "community",
        "huggingface",
    )),
    ("Search", (
        "retrieval",
        "rag",
        "search",
        "knowledge base",
        "vector database",
        "embedding",
        "semantic search",
    )),
    ("Data", (
        "dataset",
        "data",
        "annotation",
        "labeling",
        "synthetic data",
        "pretraining",
    )),
    ("Optimization", (
        "optimization",
        "training",
        "fine-tuning",
        "finetuning",
        "learning rate",
        "gradient",
        "loss",
    )),
    ("Applications", (
        "application",
        "use case",
        "product",
        "tool",
        "plugin",
        "extension",
        "integration",
    )),
)


def _contains_any_keyword(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def extract_topics(title: str, summary: Optional[str] = None) -> List[str]:
    """Return the topic labels matching an item's title and summary.

    Labels come back in rule order, each at most once.
    """
    text_lower = f"{title} {summary or ''}".lower()
    return [label for label, keywords in TOPIC_RULES if _contains_any_keyword(text_lower, keywords)]
