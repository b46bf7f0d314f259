# -*- coding: utf-8 -*-
"""Pydantic schemas for topic practice endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from pdd_trainer.domain.enums import ProgressStatus, TestAttemptStatus

from ..schemas import AnswerBreakdownSchema, AttemptQuestionSchema


class TopicWithProgressSchema(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    questions_count: int
    status: ProgressStatus
    questions_total: int
    questions_answered: int
    correct_answers: int
    last_attempt_id: Optional[int] = None
    last_attempt_at: Optional[datetime] = None


class TopicStartSchema(BaseModel):
    attempt_id: int
    topic_id: int
    topic_name: str
    total_questions: int
    questions: List[AttemptQuestionSchema]


class AttemptProgressSchema(BaseModel):
    answered: int
    total: int


class TopicAttemptSchema(BaseModel):
    attempt_id: int
    topic_id: int
    topic_name: str
    status: TestAttemptStatus
    started_at: datetime
    questions: List[AttemptQuestionSchema]
    answered_question_ids: List[int]
    progress: AttemptProgressSchema


class TopicProgressCountersSchema(BaseModel):
    questions_answered: int
    correct_answers: int


class TopicAnswerResultSchema(BaseModel):
    is_correct: bool
    correct_answer_id: Optional[int] = None
    correct_answers: int
    incorrect_answers: int
    answered: int
    total_questions: int
    progress: TopicProgressCountersSchema


class TopicFinishSchema(BaseModel):
    attempt_id: int
    topic_id: int
    status: TestAttemptStatus
    correct_answers: int
    incorrect_answers: int
    total_questions: int
    required_correct: int
    time_spent_seconds: int
    passed: bool


class TopicResultsSchema(BaseModel):
    attempt_id: int
    topic_id: int
    topic_name: str
    status: TestAttemptStatus
    correct_answers: int
    incorrect_answers: int
    total_questions: int
    time_spent_seconds: int
    passed: bool
    results: List[AnswerBreakdownSchema]
