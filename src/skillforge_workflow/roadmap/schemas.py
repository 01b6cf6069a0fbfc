"""Structured-output models requested from the generator."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

GoalType = Literal["broad", "specific", "small", "unclear"]


class GoalAnalysis(BaseModel):
    goal_title: str = Field(description="A concise title for the user's goal.")
    goal_summary: str = Field(description="A brief summary of the user's goal.")
    goal_type: GoalType = Field(description="The classified type of the goal.")
    reasoning: str = Field(description="Explanation of why this goal type was chosen.")
    follow_up_questions: list[str] = Field(
        default_factory=list,
        description="Two clarifying follow-up questions if the goal is 'unclear'.",
    )


class TitleDescription(BaseModel):
    title: str = Field(description="The title.")
    description: str = Field(description="A brief description.")


class TopicList(BaseModel):
    topics: list[TitleDescription] = Field(
        description="List of generated topics relevant to the goal."
    )


class SubtopicList(BaseModel):
    subtopics: list[TitleDescription] = Field(
        description="List of generated subtopics relevant to the topic."
    )


class Resource(BaseModel):
    title: str = Field(description="The title of the resource.")
    link: str = Field(description="The URL link to the resource.")
    type: str = Field(description="The type of resource (e.g., article, video, course).")


class ResourceList(BaseModel):
    resources: list[Resource] = Field(
        description="List of generated learning resources relevant to the topic."
    )


class Project(BaseModel):
    name: str = Field(description="The name of the project.")
    description: str = Field(description="A brief description of the project.")
    difficulty: str = Field(description="The difficulty level (e.g., easy, medium, hard).")


class ProjectIdea(BaseModel):
    project: Project = Field(description="Generated project relevant to the topic.")
