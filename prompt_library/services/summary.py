import re
from typing import List, Optional, Pattern, Tuple


class SummaryHeuristic:
    """Builds a short intent label for prompts that have no explicit summary.

    Rules are checked in order and the first match wins, so the order of
    INTENT_PATTERNS and TOPIC_PATTERNS is their priority.
    """

    DEFAULT_INTENT = "Help with"
    DEFAULT_TOPIC = "task"
    EMPTY_PROMPT_SUMMARY = "Generate AI response"
    TITLE_MAX_LENGTH = 60

    INTENT_PATTERNS: List[Tuple[Pattern, str]] = [
        (re.compile(r"help me (analyze|review|assess|evaluate)"), "Analyze"),
        (re.compile(r"create a? (plan|strategy|framework|roadmap)"), "Plan"),
        (re.compile(r"write a? (email|message|letter|document|report)"), "Write"),
        (re.compile(r"generate (ideas|suggestions|options|alternatives)"), "Brainstorm"),
        (re.compile(r"make a? (decision|choice) about"), "Decide"),
        (re.compile(r"compare (.*?) (and|vs|versus|with)"), "Compare"),
        (re.compile(r"summarize|provide a summary"), "Summarize"),
        (re.compile(r"explain|help me understand"), "Explain"),
        (re.compile(r"research|investigate|find information"), "Research"),
        (re.compile(r"optimize|improve|enhance"), "Optimize"),
        (re.compile(r"solve|fix|resolve"), "Solve"),
        (re.compile(r"design|create|build"), "Design"),
        (re.compile(r"negotiate|discuss"), "Negotiate"),
        (re.compile(r"present|pitch"), "Present"),
        (re.compile(r"schedule|organize|manage"), "Organize"),
    ]

    TOPIC_PATTERNS: List[Tuple[Pattern, str]] = [
        (re.compile(r"(project|product|feature|initiative)"), "project"),
        (re.compile(r"(team|staff|employee|people)"), "team"),
        (re.compile(r"(strategy|strategic|vision)"), "strategy"),
        (re.compile(r"(budget|financial|cost|revenue)"), "budget"),
        (re.compile(r"(customer|client|user)"), "customer"),
        (re.compile(r"(market|competition|competitor)"), "market"),
        (re.compile(r"(process|workflow|procedure)"), "process"),
        (re.compile(r"(stakeholder|partner)"), "stakeholders"),
        (re.compile(r"(meeting|presentation|discussion)"), "meeting"),
        (re.compile(r"(risk|problem|issue|challenge)"), "risks"),
    ]

    @staticmethod
    def _first_match(rules: List[Tuple[Pattern, str]], text: str) -> Optional[str]:
        for pattern, label in rules:
            if pattern.search(text):
                return label
        return None

    @classmethod
    def detect_intent(cls, text: str) -> str:
        return cls._first_match(cls.INTENT_PATTERNS, text.lower()) or cls.DEFAULT_INTENT

    @classmethod
    def detect_topic(cls, text: str, title: Optional[str] = None) -> str:
        topic = cls._first_match(cls.TOPIC_PATTERNS, text.lower())
        if topic is None and title:
            # Fall back to the title for context
            topic = cls._first_match(cls.TOPIC_PATTERNS, title.lower())
        return topic or cls.DEFAULT_TOPIC

    @classmethod
    def generate(cls, prompt_text: Optional[str], title: Optional[str] = None) -> str:
        """
        Generate a concise summary of user intent from prompt content.

        Args:
            prompt_text: The prompt body
            title: Prompt title, used as topic fallback and as the summary
                itself when no intent is recognised

        Returns:
            A short label such as "Analyze budget systematically"
        """
        if not prompt_text:
            return cls.EMPTY_PROMPT_SUMMARY

        intent = cls.detect_intent(prompt_text)
        topic = cls.detect_topic(prompt_text, title)

        if intent == cls.DEFAULT_INTENT:
            if title and len(title) < cls.TITLE_MAX_LENGTH:
                return title
            return f"Guide {topic} decisions and actions"

        return f"{intent} {topic} systematically"


def generate_summary(prompt_text: Optional[str], title: Optional[str] = None) -> str:
    return SummaryHeuristic.generate(prompt_text, title)


def summary_for(prompt) -> str:
    """Explicit summary of a Prompt row, or the heuristic one."""
    return prompt.summary or generate_summary(prompt.prompt, prompt.title)
