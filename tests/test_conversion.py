import pytest

from ideaboard.exceptions import NotFoundError, PropagatedError, StoreError
from ideaboard.services.conversion import task_labels, task_priority
from ideaboard.services.idea_board import IdeaBoard, build_idea_board
from ideaboard.services.store import IDEAS, TASKS, USERS, SqlAlchemyDocumentStore
from tests.fakes import FakeTaskService, FakeUserDirectory


async def _idea_with_votes(board, store, votes, tags):
    idea = await board.create_idea(
        'team-123',
        'hackathon-123',
        {'title': 'Viral Feature', 'description': 'Everyone loves this', 'tags': tags, 'created_by': 'user-123'},
    )
    await store.update(IDEAS, idea.id, {'vote_count': votes})
    return idea


@pytest.mark.parametrize('votes, expected', [(0, 'medium'), (4, 'medium'), (5, 'high'), (8, 'high')])
def test_task_priority_from_votes(votes, expected):
    assert task_priority(votes) == expected


def test_task_labels_append_provenance():
    assert task_labels(['ui']) == ['ui', 'from-idea']
    assert task_labels([]) == ['from-idea']
    assert task_labels(None) == ['from-idea']


@pytest.mark.asyncio
async def test_convert_popular_idea(board, store, task_service):
    """Test a five-vote idea becomes a high priority task and goes in progress"""
    idea = await _idea_with_votes(board, store, 5, ['ui'])

    result = await board.convert_idea_to_task(idea.id, 'Admin User')

    assert result.task.priority == 'high'
    assert result.task.labels == ['ui', 'from-idea']
    assert result.updated_idea.status == 'in_progress'
    assert (await board.get_idea(idea.id)).status == 'in_progress'

    [call] = task_service.calls
    assert call['team_id'] == 'team-123'
    assert call['hackathon_id'] == 'hackathon-123'
    assert call['fields'].title == 'Viral Feature'
    assert call['fields'].description == 'Everyone loves this\n\n_Converted from idea with 5 votes_'
    assert call['fields'].assigned_to == 'user-123'
    assert call['fields'].created_by == 'user-123'
    assert call['creator_name'] == 'Test User'
    assert call['assignee_name'] == 'Test User'


@pytest.mark.asyncio
async def test_convert_modest_idea_is_medium_priority(board, store, task_service):
    """Test fewer than five votes gives a medium priority task"""
    idea = await _idea_with_votes(board, store, 3, ['frontend', 'innovation'])

    result = await board.convert_idea_to_task(idea.id, 'Admin User')

    assert result.task.priority == 'medium'
    assert result.task.labels == ['frontend', 'innovation', 'from-idea']


@pytest.mark.asyncio
async def test_convert_notifies(board, store, notifier):
    """Test conversion posts a message naming the converter and task"""
    idea = await _idea_with_votes(board, store, 3, [])

    result = await board.convert_idea_to_task(idea.id, 'Admin User')

    [message] = notifier.of_type('idea_converted_to_task')
    assert message['text'] == '🔄 Admin User converted idea "Viral Feature" to a task (3 votes)'
    assert message['metadata']['idea_id'] == idea.id
    assert message['metadata']['task_id'] == result.task.id
    assert message['metadata']['vote_count'] == 3
    assert message['metadata']['converted_by'] == 'Admin User'


@pytest.mark.asyncio
async def test_task_failure_leaves_idea_untouched(store, notifier, points, users, test_settings):
    """Test a failing task service propagates and changes nothing"""
    failing = FakeTaskService(error=RuntimeError('Task creation failed'))
    board = IdeaBoard(store, notifier, points, failing, users, test_settings)
    idea = await _idea_with_votes(board, store, 2, [])
    await board.update_idea_status(idea.id, 'approved', 'Lead')
    before = await board.get_idea(idea.id)
    updates_before = store.updates

    with pytest.raises(RuntimeError, match='Task creation failed'):
        await board.convert_idea_to_task(idea.id, 'Admin')

    after = await board.get_idea(idea.id)
    assert after.status == 'approved'
    assert after.version == before.version
    assert store.updates == updates_before
    assert notifier.of_type('idea_converted_to_task') == []


@pytest.mark.asyncio
async def test_name_lookup_failure_falls_back_to_caller(store, notifier, points, task_service, test_settings):
    """Test a broken user directory does not abort conversion"""
    board = IdeaBoard(store, notifier, points, task_service, FakeUserDirectory(fail=True), test_settings)
    idea = await _idea_with_votes(board, store, 1, [])

    result = await board.convert_idea_to_task(idea.id, 'Admin')

    assert result.updated_idea.status == 'in_progress'
    assert task_service.calls[0]['creator_name'] == 'Admin'
    assert task_service.calls[0]['assignee_name'] == 'Admin'


@pytest.mark.asyncio
async def test_unknown_creator_falls_back_to_caller(store, notifier, points, task_service, test_settings):
    """Test an unknown creator id uses the caller's name"""
    board = IdeaBoard(store, notifier, points, task_service, FakeUserDirectory({}), test_settings)
    idea = await _idea_with_votes(board, store, 1, [])

    await board.convert_idea_to_task(idea.id, 'Admin')

    assert task_service.calls[0]['creator_name'] == 'Admin'


@pytest.mark.asyncio
async def test_convert_missing_idea(board, task_service):
    """Test converting an unknown idea is not found and creates no task"""
    with pytest.raises(NotFoundError):
        await board.convert_idea_to_task('missing', 'Admin')

    assert task_service.calls == []


@pytest.mark.asyncio
async def test_convert_with_database_task_service(db_session, test_settings):
    """Test the default task service stores the task and resolves the creator's name"""
    store = SqlAlchemyDocumentStore(db_session)
    await store.create(USERS, {'id': 'user-123', 'full_name': 'Priya Shah', 'email': 'priya@example.com'})
    board = build_idea_board(db_session, test_settings)
    idea = await _idea_with_votes(board, store, 6, ['api'])

    result = await board.convert_idea_to_task(idea.id, 'Admin')

    [task] = await store.list(TASKS, {'team_id': 'team-123'})
    assert task['id'] == result.task.id
    assert task['priority'] == 'high'
    assert task['status'] == 'todo'
    assert task['labels'] == ['api', 'from-idea']
    assert task['assigned_to'] == 'user-123'
    assert result.updated_idea.status == 'in_progress'


@pytest.mark.asyncio
async def test_task_store_failure_is_wrapped(store, notifier, points, users, test_settings):
    """Test a store-level task failure surfaces with the conversion context"""
    failing = FakeTaskService(error=StoreError('disk full', TASKS))
    board = IdeaBoard(store, notifier, points, failing, users, test_settings)
    idea = await _idea_with_votes(board, store, 2, [])

    with pytest.raises(PropagatedError, match='Failed to convert idea to task: disk full') as excinfo:
        await board.convert_idea_to_task(idea.id, 'Admin')

    assert excinfo.value.operation == 'convert idea to task'
    assert (await board.get_idea(idea.id)).status == 'submitted'
