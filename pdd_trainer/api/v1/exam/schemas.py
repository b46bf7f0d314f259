# -*- coding: utf-8 -*-
"""Pydantic schemas for exam endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from pdd_trainer.domain.enums import TestAttemptStatus, TestType

from ..schemas import AnswerBreakdownSchema, AttemptQuestionSchema


class ExamStartSchema(BaseModel):
    attempt_id: int
    total_questions: int
    started_at: datetime
    questions: List[AttemptQuestionSchema]


class ExamAnswerResultSchema(BaseModel):
    is_correct: bool
    correct_answer_id: Optional[int] = None
    correct_answers: int
    incorrect_answers: int
    answered: int
    total_questions: int
    additional_questions: Optional[List[AttemptQuestionSchema]] = None
    additional_required: bool = False


class AdditionalQuestionsSchema(BaseModel):
    attempt_id: int
    total_questions: int
    additional_questions: List[AttemptQuestionSchema]


class AttemptSummarySchema(BaseModel):
    attempt_id: int
    test_type: TestType
    status: TestAttemptStatus
    topic_id: Optional[int] = None
    total_questions: int
    base_questions_count: int
    additional_questions_answered: int
    correct_answers: int
    incorrect_answers: int
    score: int
    time_spent_seconds: int
    started_at: datetime
    completed_at: Optional[datetime] = None


class ExamFinishSchema(AttemptSummarySchema):
    answered: int
    passed: bool


class ExamResultsSchema(ExamFinishSchema):
    answers: List[AnswerBreakdownSchema]


class ExamStatsBlockSchema(BaseModel):
    attempts: int
    passed: int
    failed: int
    average_score: int
    average_time: int
    last_attempt: Optional[AttemptSummarySchema] = None


class UserStatsSchema(BaseModel):
    total_attempts: int
    average_score: int
    average_time: int
    exam: ExamStatsBlockSchema
