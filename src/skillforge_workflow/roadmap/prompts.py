"""Prompt construction for the goal analyzer steps."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

GOAL_ANALYZER_SYSTEM = """\
You are an expert AI Goal Analyzer. Your task is to analyze a user's goal description and \
classify it into one of the following goal types: 'broad', 'specific', 'small', or 'unclear'.

### Definitions:
- **Broad Goal:** Involves multiple topics and subtopics. Example: 'I want to become a full-stack developer.'
- **Specific Goal:** Has a clear, concrete objective (project-level). Example: 'I want to build a portfolio website.'
- **Small Goal:** Focused on one topic or skill with limited scope. Example: 'I want to learn Docker.'
- **Unclear Goal:** Too vague to categorize confidently. Example: 'I want to improve myself.'

### Instructions:
1. Identify the goal type clearly.
2. Return a structured JSON with reasoning.
3. Ask 2 clarifying follow-up questions if the goal is 'unclear'."""


def _subject_block(label: str, subject: Mapping[str, Any]) -> str:
    return (
        f"### {label}:\n"
        f"Title: {subject.get('title', '')}\n"
        f"Description: {subject.get('description', '')}"
    )


def goal_analyzer_messages(user_request: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": GOAL_ANALYZER_SYSTEM},
        {"role": "user", "content": f"### User's Goal:\n{user_request}"},
    ]


def topic_generator_messages(goal: Mapping[str, Any]) -> list[dict[str, str]]:
    system = (
        "You are an expert AI Topic Generator. Your task is to generate relevant topics "
        "based on a user's goal description.\n"
        "### Instructions:\n"
        "1. Analyze the goal provided by the user.\n"
        "2. Generate a list of relevant topics that align with the goal.\n"
        "3. Return the topics in a structured JSON format."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": _subject_block("User's Goal", goal)},
    ]


def subtopic_generator_messages(topic: Mapping[str, Any]) -> list[dict[str, str]]:
    system = (
        "You are an expert AI Subtopic Generator. Your task is to break a learning topic "
        "into the subtopics a learner should cover.\n"
        "### Instructions:\n"
        "1. Analyze the topic provided.\n"
        "2. Generate a list of relevant subtopics for it.\n"
        "3. Return the subtopics in a structured JSON format."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": _subject_block("Topic", topic)},
    ]


def resource_generator_messages(subject: Mapping[str, Any]) -> list[dict[str, str]]:
    system = (
        "You are an expert AI Resource Generator. Your task is to generate relevant learning "
        "resources based on a topic description.\n"
        "### Instructions:\n"
        "1. Analyze the topic provided.\n"
        "2. Generate a list of relevant learning resources (articles, tutorials, videos, courses).\n"
        "3. Return the resources in a structured JSON format."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": _subject_block("Topic", subject)},
    ]


def project_generator_messages(subject: Mapping[str, Any]) -> list[dict[str, str]]:
    system = (
        "You are an expert AI Project Generator. Your task is to generate a relevant "
        "hands-on project based on a topic description.\n"
        "### Instructions:\n"
        "1. Analyze the topic provided.\n"
        "2. Generate a project idea that aligns with the topic.\n"
        "3. Return the project in a structured JSON format."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": _subject_block("Topic", subject)},
    ]
