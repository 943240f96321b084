"""End-to-end tests of the practice workspace with a mocked API client."""
import asyncio
import json
import pytest

from conftest import make_evaluation
from models.session import SessionPhase
from services.exceptions import ConfigurationError, EvaluationError, GenerationError, ServiceError
from services.practice_workspace import InterviewPrepWorkspace
from services.session_state import PracticeSessionState


@pytest.fixture
def workspace(api_client, timer):
    return InterviewPrepWorkspace(client=api_client, state=PracticeSessionState(timer))


class TestStartSession:

    async def test_creates_generates_persists_and_activates(self, workspace, api_client, config):
        assert await workspace.start_session(config) is True

        assert workspace.state.phase == SessionPhase.ACTIVE
        assert workspace.state.cursor == 0
        assert [q.id for q in workspace.state.questions] == [1, 2, 3]
        assert workspace.state.session.id == 7
        api_client.create_session.assert_awaited_once()
        assert api_client.create_question.await_count == 3

    async def test_invalid_config_raises_before_any_request(self, workspace, api_client):
        with pytest.raises(ConfigurationError):
            await workspace.start_session({"title": "x", "interviewType": "technical", "numberOfQuestions": 99})
        api_client.create_session.assert_not_awaited()

    async def test_generation_failure_keeps_prior_state(self, workspace, api_client, config):
        await workspace.start_session(config)
        await workspace.submit_answer("first answer")
        before = workspace.state.questions

        api_client.generate_questions.return_value = []
        with pytest.raises(GenerationError):
            await workspace.start_session(config)

        assert workspace.state.phase == SessionPhase.ACTIVE
        assert workspace.state.questions == before
        assert workspace.is_generating is False

    async def test_failure_from_empty_stays_empty(self, workspace, api_client, config):
        api_client.create_session.side_effect = ServiceError("down")

        with pytest.raises(ServiceError):
            await workspace.start_session(config)
        assert workspace.state.phase == SessionPhase.EMPTY

    async def test_question_save_failure_discards_session(self, workspace, api_client, config):
        saved = []

        async def flaky_create(session_id, question):
            if question.id == "q_2":
                raise ServiceError("write failed")
            saved.append(question.id)
            return question

        api_client.create_question.side_effect = flaky_create

        with pytest.raises(ServiceError):
            await workspace.start_session(config)

        assert sorted(saved) == ["q_1", "q_3"]
        api_client.delete_session.assert_awaited_once_with(7)
        assert workspace.state.phase == SessionPhase.EMPTY
        assert workspace.is_generating is False

    async def test_discard_failure_keeps_original_error(self, workspace, api_client, config):
        api_client.generate_questions.return_value = []
        api_client.delete_session.side_effect = ServiceError("also down")

        with pytest.raises(GenerationError):
            await workspace.start_session(config)
        api_client.delete_session.assert_awaited_once_with(7)

    async def test_second_start_while_generating_is_rejected(self, workspace, api_client, config):
        gate = asyncio.Event()
        original = api_client.generate_questions.return_value

        async def slow_generate(_request):
            await gate.wait()
            return original

        api_client.generate_questions.side_effect = slow_generate
        first = asyncio.create_task(workspace.start_session(config))
        await asyncio.sleep(0)

        assert await workspace.start_session(config) is False
        gate.set()
        assert await first is True
        assert api_client.create_session.await_count == 1


class TestSubmitAnswer:

    async def test_scores_current_question(self, workspace, api_client, config, clock):
        await workspace.start_session(config)
        clock.advance(25)

        evaluation = await workspace.submit_answer("I would add an index.")

        assert evaluation.score == 80
        q = workspace.state.get_question(1)
        assert q.evaluation.score == 80
        assert q.user_answer == "I would add an index."
        assert q.time_spent == 25
        assert workspace.statistics.average_score == 80
        api_client.evaluate_answer.assert_awaited_once_with("Question 1?", "I would add an index.")
        api_client.update_question.assert_awaited_once_with(
            7, 1, {"userAnswer": "I would add an index.", "evaluation": make_evaluation(80).to_api(), "timeSpent": 25}
        )

    async def test_partial_session_statistics(self, workspace, api_client, config):
        await workspace.start_session(config)
        await workspace.submit_answer("answer one")
        workspace.next_question()
        api_client.evaluate_answer.return_value = make_evaluation(60).to_api()
        await workspace.submit_answer("answer two")

        stats = workspace.statistics
        assert stats.average_score == 70
        assert stats.completion_percentage == 67

    async def test_time_spent_captured_before_evaluation(self, workspace, api_client, config, clock):
        await workspace.start_session(config)
        clock.advance(10)

        async def slow_evaluate(question, answer):
            clock.advance(50)
            return make_evaluation(70).to_api()

        api_client.evaluate_answer.side_effect = slow_evaluate
        await workspace.submit_answer("answer")

        assert workspace.state.get_question(1).time_spent == 10

    async def test_answer_for_earlier_question_keeps_its_own_time(self, workspace, api_client, config, clock):
        await workspace.start_session(config)
        clock.advance(100)
        workspace.next_question()
        clock.advance(5)

        await workspace.submit_answer("late answer for q1", question_id=1)

        assert workspace.state.get_question(1).time_spent == 100
        assert workspace.state.get_question(2).time_spent is None
        assert api_client.update_question.await_args.args[2]["timeSpent"] == 100

    async def test_answer_for_unvisited_question_sends_no_time(self, workspace, api_client, config, clock):
        await workspace.start_session(config)
        clock.advance(30)

        await workspace.submit_answer("answer for q3", question_id=3)

        assert workspace.state.get_question(3).time_spent is None
        assert "timeSpent" not in api_client.update_question.await_args.args[2]

    async def test_navigating_away_still_merges_by_id(self, workspace, api_client, config):
        await workspace.start_session(config)
        gate = asyncio.Event()

        async def slow_evaluate(question, answer):
            await gate.wait()
            return make_evaluation(90).to_api()

        api_client.evaluate_answer.side_effect = slow_evaluate
        pending = asyncio.create_task(workspace.submit_answer("answer for q1"))
        await asyncio.sleep(0)
        workspace.next_question()
        gate.set()
        await pending

        assert workspace.current_question.id == 2
        assert workspace.state.get_question(1).evaluation.score == 90
        assert workspace.state.get_question(2).evaluation is None

    async def test_out_of_order_resolution(self, workspace, api_client, config):
        await workspace.start_session(config)
        gates = {"Question 1?": asyncio.Event(), "Question 2?": asyncio.Event()}
        scores = {"Question 1?": 80, "Question 2?": 60}

        async def gated_evaluate(question, answer):
            await gates[question].wait()
            return make_evaluation(scores[question]).to_api()

        api_client.evaluate_answer.side_effect = gated_evaluate
        a = asyncio.create_task(workspace.submit_answer("A", question_id=1))
        b = asyncio.create_task(workspace.submit_answer("B", question_id=2))
        await asyncio.sleep(0)
        gates["Question 2?"].set()
        await b
        gates["Question 1?"].set()
        await a

        assert workspace.state.get_question(1).evaluation.score == 80
        assert workspace.state.get_question(2).evaluation.score == 60

    async def test_duplicate_submit_while_evaluating_is_rejected(self, workspace, api_client, config):
        await workspace.start_session(config)
        gate = asyncio.Event()

        async def gated_evaluate(question, answer):
            await gate.wait()
            return make_evaluation(70).to_api()

        api_client.evaluate_answer.side_effect = gated_evaluate
        first = asyncio.create_task(workspace.submit_answer("A"))
        await asyncio.sleep(0)

        assert await workspace.submit_answer("A again") is None
        gate.set()
        await first

        assert api_client.evaluate_answer.await_count == 1
        assert workspace.state.get_question(1).user_answer == "A"

    async def test_evaluation_failure_leaves_question_unset(self, workspace, api_client, config):
        await workspace.start_session(config)
        api_client.evaluate_answer.side_effect = ServiceError("timeout")

        with pytest.raises(EvaluationError):
            await workspace.submit_answer("answer")

        assert workspace.state.get_question(1).evaluation is None
        assert workspace.evaluating == set()
        api_client.update_question.assert_not_awaited()

    async def test_blank_answer_ignored(self, workspace, api_client, config):
        await workspace.start_session(config)
        assert await workspace.submit_answer("   ") is None
        api_client.evaluate_answer.assert_not_awaited()

    async def test_not_active_ignored(self, workspace, api_client):
        assert await workspace.submit_answer("answer") is None
        api_client.evaluate_answer.assert_not_awaited()


class TestEndSession:

    async def test_persists_final_score(self, workspace, api_client, config):
        await workspace.start_session(config)
        await workspace.submit_answer("answer")

        stats = await workspace.end_session()

        assert workspace.state.phase == SessionPhase.ENDED
        assert not workspace.state.timer.is_running
        assert stats.average_score == 80
        api_client.update_session.assert_awaited_once_with(7, {"score": 80})

    async def test_end_without_scores_persists_zero(self, workspace, api_client, config):
        await workspace.start_session(config)
        stats = await workspace.end_session()

        assert stats.average_score == 0
        api_client.update_session.assert_awaited_once_with(7, {"score": 0})

    async def test_failed_score_save_can_be_retried(self, workspace, api_client, config):
        await workspace.start_session(config)
        await workspace.submit_answer("answer")
        api_client.update_session.side_effect = ServiceError("down")

        with pytest.raises(ServiceError):
            await workspace.end_session()
        assert workspace.state.phase == SessionPhase.ENDED
        assert workspace.unsaved_result.average_score == 80

        api_client.update_session.side_effect = None
        stats = await workspace.end_session()

        assert stats.average_score == 80
        assert workspace.unsaved_result is None
        assert api_client.update_session.await_count == 2
        api_client.update_session.assert_awaited_with(7, {"score": 80})

    async def test_end_after_successful_save_is_noop(self, workspace, api_client, config):
        await workspace.start_session(config)
        await workspace.end_session()

        assert await workspace.end_session() is None
        api_client.update_session.assert_awaited_once()

    async def test_end_when_not_active_is_noop(self, workspace, api_client):
        assert await workspace.end_session() is None
        api_client.update_session.assert_not_awaited()

    async def test_export_contains_session_and_questions(self, workspace, config):
        await workspace.start_session(config)
        data = json.loads(workspace.export())

        assert data["session"]["id"] == 7
        assert len(data["questions"]) == 3
        assert "exportedAt" in data


class TestProgress:

    async def test_progress_follows_cursor(self, workspace, config):
        await workspace.start_session(config)
        assert workspace.progress_percentage == 33
        workspace.jump_to(2)
        assert workspace.progress_percentage == 100
