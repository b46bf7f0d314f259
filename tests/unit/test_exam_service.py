# -*- coding: utf-8 -*-
"""
Unit тесты для ExamService
"""

from datetime import datetime, timedelta

import pytest

from pdd_trainer.domain.enums import TestAttemptStatus
from pdd_trainer.repository.attempts import AnswerTally
from pdd_trainer.service.exam import (EXAM_BASE_QUESTIONS, ExamService,
                                      elapsed_seconds, extension_size,
                                      score_percent)
from pdd_trainer.utils.exceptions import ConflictError, ErrorCode, NotFoundError
from tests.fixtures import (build_answer_key, create_test_questions,
                            create_test_topic, create_test_user)


async def setup_exam(session, questions_count: int = 35):
    user = await create_test_user(session)
    topic = await create_test_topic(session)
    questions = await create_test_questions(session, topic, count=questions_count)
    return user, build_answer_key(questions)


async def answer_questions(service, user, attempt_id, questions, key, wrong: int = 0):
    """Ответить на вопросы по порядку, первые ``wrong`` ответов неверные."""
    result = None
    for index, question in enumerate(questions):
        correct_id, wrong_id = key[question["id"]]
        answer_id = wrong_id if index < wrong else correct_id
        result = await service.submit_answer(user, attempt_id, question["id"], answer_id)
    return result


class TestExamHelpers:
    """Вспомогательные функции экзамена"""

    def test_score_percent(self):
        assert score_percent(18, 20) == 90
        assert score_percent(0, 0) == 0

    def test_elapsed_seconds_never_negative(self):
        future = datetime.now() + timedelta(minutes=5)
        assert elapsed_seconds(future) == 0

    def test_elapsed_seconds(self):
        started = datetime(2024, 1, 1, 12, 0, 0)
        assert elapsed_seconds(started, started + timedelta(seconds=90, milliseconds=600)) == 90

    @pytest.mark.parametrize(
        "answered,correct,expected",
        [(20, 19, 5), (20, 18, 10), (20, 17, 0), (20, 20, 0), (19, 18, 0)],
    )
    def test_extension_size(self, answered, correct, expected):
        class Attempt:
            total_questions = EXAM_BASE_QUESTIONS
            base_questions_count = EXAM_BASE_QUESTIONS

        tally = AnswerTally(answered=answered, correct=correct)
        assert extension_size(Attempt(), tally) == expected

    def test_extension_size_granted_once(self):
        class Attempt:
            total_questions = EXAM_BASE_QUESTIONS + 5
            base_questions_count = EXAM_BASE_QUESTIONS

        assert extension_size(Attempt(), AnswerTally(answered=20, correct=19)) == 0


class TestExamService:
    """Тесты жизненного цикла экзамена"""

    @pytest.mark.asyncio
    async def test_start_exam_returns_ticket(self, test_session):
        """Экзамен начинается с 20 различных вопросов без признаков правильности"""
        # Arrange
        user, _ = await setup_exam(test_session, questions_count=25)
        service = ExamService(test_session)

        # Act
        result = await service.start_exam(user)

        # Assert
        assert result["total_questions"] == 20
        assert len(result["questions"]) == 20
        assert len({question["id"] for question in result["questions"]}) == 20
        for question in result["questions"]:
            assert len(question["answers"]) == 3
            for answer in question["answers"]:
                assert set(answer) == {"id", "text"}

    @pytest.mark.asyncio
    async def test_start_exam_not_enough_questions(self, test_session):
        user, _ = await setup_exam(test_session, questions_count=19)
        service = ExamService(test_session)

        with pytest.raises(ConflictError) as exc_info:
            await service.start_exam(user)

        assert exc_info.value.error_code == ErrorCode.NOT_ENOUGH_QUESTIONS

    @pytest.mark.asyncio
    async def test_exam_without_errors_passes(self, test_session):
        """20 правильных ответов: продления нет, экзамен сдан"""
        # Arrange
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        # Act
        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key
        )
        result = await service.finish_exam(user, exam["attempt_id"])

        # Assert
        assert last["additional_required"] is False
        assert last["additional_questions"] is None
        assert result["passed"] is True
        assert result["status"] == TestAttemptStatus.PASSED
        assert result["correct_answers"] == 20
        assert result["score"] == 100

    @pytest.mark.asyncio
    async def test_finish_early_without_errors_passes(self, test_session):
        """Досрочное завершение без ошибок и без продления: экзамен сдан"""
        # Arrange
        user, key = await setup_exam(test_session, questions_count=25)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        # Act
        await answer_questions(
            service, user, exam["attempt_id"], exam["questions"][:1], key
        )
        result = await service.finish_exam(user, exam["attempt_id"])

        # Assert
        assert result["passed"] is True
        assert result["status"] == TestAttemptStatus.PASSED
        assert result["answered"] == 1
        assert result["incorrect_answers"] == 0

    @pytest.mark.asyncio
    async def test_answer_after_all_questions_conflict(self, test_session):
        """После ответа на все вопросы билета новые ответы не принимаются"""
        # Arrange
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        await answer_questions(service, user, exam["attempt_id"], exam["questions"], key)
        ticket_ids = {question["id"] for question in exam["questions"]}
        outside_id = next(qid for qid in key if qid not in ticket_ids)

        # Act & Assert
        with pytest.raises(ConflictError):
            await service.submit_answer(
                user, exam["attempt_id"], outside_id, key[outside_id][1]
            )

        result = await service.finish_exam(user, exam["attempt_id"])
        assert result["answered"] == 20
        assert result["total_questions"] == 20
        assert result["incorrect_answers"] == 0
        assert result["additional_questions_answered"] == 0
        assert result["passed"] is True

    @pytest.mark.asyncio
    async def test_one_error_grants_five_questions(self, test_session):
        """Одна ошибка в базовых вопросах даёт 5 дополнительных вопросов"""
        # Arrange
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        base_ids = {question["id"] for question in exam["questions"]}

        # Act
        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=1
        )

        # Assert
        assert last["additional_required"] is True
        assert last["total_questions"] == 25
        extra = last["additional_questions"]
        assert len(extra) == 5
        assert not base_ids & {question["id"] for question in extra}

        # Дополнительные вопросы отвечены верно: экзамен сдан
        await answer_questions(service, user, exam["attempt_id"], extra, key)
        result = await service.finish_exam(user, exam["attempt_id"])
        assert result["passed"] is True
        assert result["total_questions"] == 25
        assert result["additional_questions_answered"] == 5
        assert result["incorrect_answers"] == 1

    @pytest.mark.asyncio
    async def test_two_errors_grant_ten_questions(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=2
        )

        assert last["total_questions"] == 30
        assert len(last["additional_questions"]) == 10

    @pytest.mark.asyncio
    async def test_extension_limited_by_pool(self, test_session):
        """Если вопросов не хватает, продление меньше и total растёт на выданное"""
        user, key = await setup_exam(test_session, questions_count=23)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=2
        )

        assert len(last["additional_questions"]) == 3
        assert last["total_questions"] == 23

    @pytest.mark.asyncio
    async def test_no_extension_when_pool_exhausted(self, test_session):
        """Пул исчерпан: продление не выдаётся и не запрашивается повторно"""
        user, key = await setup_exam(test_session, questions_count=20)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=1
        )

        assert last["additional_questions"] is None
        assert last["additional_required"] is False
        assert last["total_questions"] == 20
        with pytest.raises(ConflictError):
            await service.request_additional_questions(user, exam["attempt_id"])

        result = await service.finish_exam(user, exam["attempt_id"])
        assert result["passed"] is True
        assert result["incorrect_answers"] == 1

    @pytest.mark.asyncio
    async def test_three_errors_fail(self, test_session):
        """Три ошибки: продления нет, экзамен провален"""
        # Arrange
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        # Act
        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=3
        )
        result = await service.finish_exam(user, exam["attempt_id"])

        # Assert
        assert last["additional_required"] is False
        assert result["passed"] is False
        assert result["status"] == TestAttemptStatus.FAILED
        assert result["incorrect_answers"] == 3

    @pytest.mark.asyncio
    async def test_unanswered_extension_fails(self, test_session):
        """Неотвеченные дополнительные вопросы означают провал"""
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=1
        )

        result = await service.finish_exam(user, exam["attempt_id"])

        assert result["passed"] is False
        assert result["answered"] == 20
        assert result["total_questions"] == 25

    @pytest.mark.asyncio
    async def test_error_in_extension_does_not_extend_again(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        last = await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=1
        )

        last = await answer_questions(
            service, user, exam["attempt_id"], last["additional_questions"], key, wrong=1
        )
        result = await service.finish_exam(user, exam["attempt_id"])

        assert last["additional_questions"] is None
        assert last["total_questions"] == 25
        assert result["incorrect_answers"] == 2
        assert result["passed"] is True

    @pytest.mark.asyncio
    async def test_request_additional_not_available(self, test_session):
        """Продление по запросу недоступно до ответа на базовые вопросы и после выдачи"""
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        with pytest.raises(ConflictError):
            await service.request_additional_questions(user, exam["attempt_id"])

        await answer_questions(
            service, user, exam["attempt_id"], exam["questions"], key, wrong=1
        )
        with pytest.raises(ConflictError):
            await service.request_additional_questions(user, exam["attempt_id"])

    @pytest.mark.asyncio
    async def test_duplicate_answer_conflict(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        question_id = exam["questions"][0]["id"]
        correct_id, _ = key[question_id]
        await service.submit_answer(user, exam["attempt_id"], question_id, correct_id)

        with pytest.raises(ConflictError) as exc_info:
            await service.submit_answer(user, exam["attempt_id"], question_id, correct_id)

        assert exc_info.value.error_code == ErrorCode.CONFLICT

    @pytest.mark.asyncio
    async def test_wrong_answer_reports_correct_answer(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        question_id = exam["questions"][0]["id"]
        correct_id, wrong_id = key[question_id]

        result = await service.submit_answer(user, exam["attempt_id"], question_id, wrong_id)

        assert result["is_correct"] is False
        assert result["correct_answer_id"] == correct_id
        assert result["incorrect_answers"] == 1

    @pytest.mark.asyncio
    async def test_answer_from_other_question_not_found(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        first, second = exam["questions"][0]["id"], exam["questions"][1]["id"]

        with pytest.raises(NotFoundError):
            await service.submit_answer(user, exam["attempt_id"], first, key[second][0])

    @pytest.mark.asyncio
    async def test_finished_attempt_rejects_changes(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        await service.finish_exam(user, exam["attempt_id"])
        question_id = exam["questions"][0]["id"]

        with pytest.raises(ConflictError) as exc_info:
            await service.submit_answer(
                user, exam["attempt_id"], question_id, key[question_id][0]
            )
        assert exc_info.value.error_code == ErrorCode.ATTEMPT_COMPLETED

        with pytest.raises(ConflictError):
            await service.finish_exam(user, exam["attempt_id"])

    @pytest.mark.asyncio
    async def test_foreign_attempt_not_found(self, test_session):
        user, _ = await setup_exam(test_session)
        other = await create_test_user(test_session, email="other@x.com")
        service = ExamService(test_session)
        exam = await service.start_exam(user)

        with pytest.raises(NotFoundError):
            await service.get_results(other, exam["attempt_id"])

    @pytest.mark.asyncio
    async def test_results_breakdown(self, test_session):
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)
        exam = await service.start_exam(user)
        questions = exam["questions"][:2]
        await answer_questions(service, user, exam["attempt_id"], questions, key, wrong=1)

        results = await service.get_results(user, exam["attempt_id"])

        assert results["answered"] == 2
        assert [item["question_id"] for item in results["answers"]] == [
            question["id"] for question in questions
        ]
        first = results["answers"][0]
        assert first["is_correct"] is False
        assert first["correct_answer_id"] == key[first["question_id"]][0]

    @pytest.mark.asyncio
    async def test_user_stats(self, test_session):
        """Статистика по завершённым попыткам, пустая статистика без деления на ноль"""
        user, key = await setup_exam(test_session)
        service = ExamService(test_session)

        empty = await service.get_user_stats(user)
        assert empty["total_attempts"] == 0
        assert empty["average_score"] == 0
        assert empty["exam"]["last_attempt"] is None

        passed = await service.start_exam(user)
        await answer_questions(service, user, passed["attempt_id"], passed["questions"], key)
        await service.finish_exam(user, passed["attempt_id"])
        failed = await service.start_exam(user)
        await answer_questions(
            service, user, failed["attempt_id"], failed["questions"][:3], key, wrong=3
        )
        await service.finish_exam(user, failed["attempt_id"])

        stats = await service.get_user_stats(user)

        assert stats["total_attempts"] == 2
        assert stats["exam"]["passed"] == 1
        assert stats["exam"]["failed"] == 1
        assert stats["average_score"] == 50
