import pytest

from ideaboard.exceptions import PropagatedError, StoreError, ValidationError
from ideaboard.services.idea_board import IdeaBoard, build_idea_board
from ideaboard.services.store import IDEAS, POINT_AWARDS, TEAM_MESSAGES, SqlAlchemyDocumentStore
from tests.fakes import RecordingNotifier, RecordingPoints


@pytest.mark.asyncio
async def test_create_idea_starts_submitted_with_no_votes(board):
    """Test a new idea is submitted with a zero vote count"""
    idea = await board.create_idea(
        'T1', 'H1', {'title': 'X', 'description': 'Y', 'created_by': 'U1'}, 'U1'
    )

    assert idea.status == 'submitted'
    assert idea.vote_count == 0
    assert idea.tags == []
    assert idea.team_id == 'T1'
    assert idea.hackathon_id == 'H1'
    assert idea.created_by == 'U1'
    assert idea.id


@pytest.mark.asyncio
async def test_create_idea_trims_fields_and_tags(board):
    """Test title, description and tags are trimmed"""
    idea = await board.create_idea(
        'T1',
        'H1',
        {'title': '  Dark mode  ', 'description': '\tfor night owls\n', 'tags': [' ui ', '', 'ux'], 'created_by': 'U1'},
    )

    assert idea.title == 'Dark mode'
    assert idea.description == 'for night owls'
    assert idea.tags == ['ui', 'ux']


@pytest.mark.asyncio
async def test_create_idea_null_tags_become_empty(board):
    """Test null tags normalize to an empty list"""
    idea = await board.create_idea(
        'T1', 'H1', {'title': 'X', 'description': 'Y', 'tags': None, 'created_by': 'U1'}
    )

    assert idea.tags == []


@pytest.mark.asyncio
@pytest.mark.parametrize('title, description', [
    ('', 'Y'),
    ('X', ''),
    ('   ', 'Y'),
    ('X', '  \n '),
    (None, None),
])
async def test_create_idea_requires_title_and_description(board, store, title, description):
    """Test blank title or description is rejected without a write"""
    with pytest.raises(ValidationError, match='Title and description are required'):
        await board.create_idea(
            'T1', 'H1', {'title': title, 'description': description, 'created_by': 'U1'}
        )

    assert await store.list(IDEAS) == []


@pytest.mark.asyncio
async def test_create_idea_requires_creator(board):
    """Test a payload without a creator is a validation error"""
    with pytest.raises(ValidationError, match='Invalid idea payload'):
        await board.create_idea('T1', 'H1', {'title': 'X', 'description': 'Y'})


@pytest.mark.asyncio
async def test_create_idea_notifies_and_awards_points(board, notifier, points):
    """Test submission posts a chat message and awards points to the creator"""
    idea = await board.create_idea(
        'team-123',
        'hackathon-123',
        {'title': 'Revolutionary Feature', 'description': 'A game-changing idea',
         'tags': ['frontend'], 'created_by': 'user-123'},
        'Test User',
    )

    [message] = notifier.of_type('idea_created')
    assert message['team_id'] == 'team-123'
    assert message['hackathon_id'] == 'hackathon-123'
    assert message['text'] == '💡 Test User submitted a new idea: "Revolutionary Feature"'
    assert message['metadata'] == {
        'idea_id': idea.id,
        'idea_title': 'Revolutionary Feature',
        'created_by': 'Test User',
        'status': 'submitted',
        'tags': ['frontend'],
    }

    [award] = points.awards
    assert award['user_id'] == 'user-123'
    assert award['action'] == 'idea_submission'
    assert award['hackathon_id'] == 'hackathon-123'
    assert award['display_name'] == 'Test User'


@pytest.mark.asyncio
async def test_create_idea_survives_side_effect_failures(store, task_service, users, test_settings):
    """Test chat and points outages never fail idea creation"""
    notifier = RecordingNotifier(fail=True)
    board = IdeaBoard(store, notifier, RecordingPoints(fail=True), task_service, users, test_settings)

    idea = await board.create_idea(
        'team-123', 'hackathon-123', {'title': 'Test Idea', 'description': 'D', 'created_by': 'user-123'}
    )

    assert idea.title == 'Test Idea'
    assert notifier.calls == 1
    assert len(await store.list(IDEAS)) == 1


@pytest.mark.asyncio
async def test_create_idea_wraps_store_failures(board, store):
    """Test store failures surface with operation context"""
    async def broken_create(collection, data):
        raise StoreError('disk full', collection)

    store.create = broken_create

    with pytest.raises(PropagatedError, match='Failed to create idea: disk full'):
        await board.create_idea('T1', 'H1', {'title': 'X', 'description': 'Y', 'created_by': 'U1'})


@pytest.mark.asyncio
async def test_default_collaborators_persist_side_effects(db_session, test_settings):
    """Test the database-backed notifier and points ledger write their rows"""
    board = build_idea_board(db_session, test_settings)
    store = SqlAlchemyDocumentStore(db_session)

    idea = await board.create_idea(
        'T1', 'H1', {'title': 'X', 'description': 'Y', 'created_by': 'U1'}, 'Alice'
    )

    [message] = await store.list(TEAM_MESSAGES, {'team_id': 'T1'})
    assert message['msg_type'] == 'idea_created'
    assert message['content'] == '💡 Alice submitted a new idea: "X"'
    assert message['metadata']['idea_id'] == idea.id
    assert message['is_bot'] is True

    [award] = await store.list(POINT_AWARDS, {'user_id': 'U1'})
    assert award['action'] == 'idea_submission'
    assert award['points'] == test_settings.POINTS_IDEA_SUBMISSION
