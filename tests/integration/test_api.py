"""
Integration tests for API endpoints.

Tests cover:
- Health check endpoints
- Daily schedule endpoint
- Shift roster endpoint
- Execution endpoints
"""
import pytest
import json
from datetime import time


@pytest.fixture
def staffed_catalog(shift_factory, operator_factory, action_factory):
    """One shift, one operator and one MONTHLY action due on 2025-06-01."""
    shift = shift_factory(name='Shift A', start_time=time(6, 0), end_time=time(14, 0), break_minutes=30)
    operator = operator_factory(name='Ana', default_shift=shift)
    action = action_factory(priority='MANDATORY', time_needed=60)
    return shift, operator, action


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.integration
    def test_ping(self, client):
        response = client.get('/health/ping')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ok'

    @pytest.mark.integration
    def test_live(self, client):
        response = client.get('/health/live')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'alive'

    @pytest.mark.integration
    def test_ready(self, client):
        response = client.get('/health/ready')
        assert response.status_code == 200
        assert json.loads(response.data)['checks']['database'] is True

    @pytest.mark.integration
    def test_status(self, client):
        response = client.get('/health/status')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'operational'
        assert data['database']['type'] == 'sqlite'


class TestScheduleAPI:
    """Tests for the daily schedule endpoint."""

    @pytest.mark.integration
    def test_daily_schedule(self, client, staffed_catalog):
        _, operator, action = staffed_catalog

        response = client.get('/api/schedule/daily?date=2025-06-01')
        assert response.status_code == 200
        data = json.loads(response.data)

        assert data['date'] == '2025-06-01'
        assert data['executionStatusKnown'] is True
        shift = data['shifts'][0]
        assert shift['shiftName'] == 'Shift A'
        assert shift['workdayStart'] == '06:00'
        lane = shift['operators'][0]
        assert lane['operatorId'] == str(operator.id)
        assert lane['capacityMinutes'] == 450
        task = lane['tasks'][0]
        assert task['actionId'] == str(action.id)
        assert task['startTime'] == '06:00'
        assert task['endTime'] == '07:00'
        assert task['executionStatus'] == 'PENDING'
        assert data['summary']['totalTasks'] == 1

    @pytest.mark.integration
    def test_query_parameters_shape_config(self, client, staffed_catalog):
        response = client.get('/api/schedule/daily?date=2025-06-01&breakDuration=0&buffer=20&groupByMachine=true')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['config']['bufferMinutes'] == 20
        assert data['config']['groupByMachine'] is True
        assert data['shifts'][0]['operators'][0]['capacityMinutes'] == 460

    @pytest.mark.integration
    @pytest.mark.parametrize('query', [
        '',
        '?date=06/01/2025',
        '?date=2025-06-01&bufferMinutes=-5',
        '?date=2025-06-01&breakDuration=abc',
        '?date=2025-06-01&groupByMachine=maybe',
    ])
    def test_invalid_input(self, client, query):
        response = client.get(f'/api/schedule/daily{query}')
        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['error'] == 'InvalidInput'
        assert data['retryable'] is False

    @pytest.mark.integration
    def test_malformed_shift_is_422(self, client, shift_factory, operator_factory):
        night = shift_factory(name='Night', start_time=time(22, 0), end_time=time(6, 0))
        operator_factory(name='Ana', default_shift=night)

        response = client.get('/api/schedule/daily?date=2025-06-01')
        assert response.status_code == 422
        assert json.loads(response.data)['error'] == 'DataIntegrityError'


    @pytest.mark.integration
    def test_storage_timeout_is_retryable_503(self, client, db, monkeypatch):
        from maintplan.error_handlers.exceptions import StorageTimeoutException
        from maintplan.services.schedule_service import DailyScheduleService

        def timed_out(self, target_date, config=None):
            raise StorageTimeoutException('Storage timed out during load shifts')

        monkeypatch.setattr(DailyScheduleService, 'build', timed_out)
        response = client.get('/api/schedule/daily?date=2025-06-01')

        assert response.status_code == 503
        assert json.loads(response.data)['retryable'] is True
        assert int(response.headers['Retry-After']) >= 1

    @pytest.mark.integration
    def test_invalid_input_has_no_retry_after(self, client, db):
        response = client.get('/api/schedule/daily?date=bad')
        assert response.status_code == 400
        assert 'Retry-After' not in response.headers


class TestRosterAPI:
    """Tests for the roster endpoint."""

    @pytest.mark.integration
    def test_roster_with_override(self, client, shift_factory, operator_factory, override_factory):
        from datetime import date
        shift_a = shift_factory(name='Shift A')
        shift_b = shift_factory(name='Shift B', start_time=time(14, 0), end_time=time(22, 0))
        operator = operator_factory(name='Ana', default_shift=shift_a)
        override_factory(operator, date(2025, 6, 10), shift_b)

        data = json.loads(client.get('/api/shifts/roster?date=2025-06-10').data)
        entry = data['operators'][0]
        assert entry['effectiveShiftName'] == 'Shift B'
        assert entry['hasOverride'] is True

        data = json.loads(client.get('/api/shifts/roster?date=2025-06-11').data)
        assert data['operators'][0]['effectiveShiftName'] == 'Shift A'

    @pytest.mark.integration
    def test_list_shifts(self, client, shift_factory):
        shift_factory(name='Shift A')
        shift_factory(name='Old', is_active=False)
        data = json.loads(client.get('/api/shifts').data)
        assert [s['shiftName'] for s in data] == ['Shift A']


class TestExecutionAPI:
    """Tests for execution endpoints."""

    @pytest.mark.integration
    def test_complete_correct_and_undo(self, client, staffed_catalog):
        _, operator, action = staffed_catalog
        body = {
            'actionId': str(action.id),
            'machineId': str(action.machine_id),
            'scheduledDate': '2025-06-01',
            'actualTime': 55,
            'completedById': str(operator.id),
        }

        response = client.put('/api/executions', json=body)
        assert response.status_code == 201
        created = json.loads(response.data)
        assert created['status'] == 'COMPLETED'
        assert created['completedByName'] == 'Ana'

        response = client.put('/api/executions', json=dict(body, status='SKIPPED'))
        assert response.status_code == 200
        assert json.loads(response.data)['id'] == created['id']

        response = client.patch(f"/api/executions/{created['id']}", json={'notes': 'Belt replaced'})
        assert response.status_code == 200
        assert json.loads(response.data)['notes'] == 'Belt replaced'

        schedule = json.loads(client.get('/api/schedule/daily?date=2025-06-01').data)
        assert schedule['shifts'][0]['operators'][0]['tasks'][0]['executionStatus'] == 'SKIPPED'

        assert client.delete(f"/api/executions/{created['id']}").status_code == 200
        assert client.delete(f"/api/executions/{created['id']}").status_code == 200

        schedule = json.loads(client.get('/api/schedule/daily?date=2025-06-01').data)
        assert schedule['shifts'][0]['operators'][0]['tasks'][0]['executionStatus'] == 'PENDING'

    @pytest.mark.integration
    def test_upsert_requires_key(self, client, db):
        response = client.put('/api/executions', json={'actionId': '1'})
        assert response.status_code == 400
        assert 'machineId' in json.loads(response.data)['fields']

    @pytest.mark.integration
    def test_unknown_operator_is_not_retryable(self, client, staffed_catalog):
        _, _, action = staffed_catalog
        body = {'actionId': action.id, 'machineId': action.machine_id, 'scheduledDate': '2025-06-01'}
        created = json.loads(client.put('/api/executions', json=body).data)

        response = client.put('/api/executions', json=dict(body, completedById=999999))
        assert response.status_code == 400
        assert json.loads(response.data)['retryable'] is False

        response = client.patch(f"/api/executions/{created['id']}", json={'completedById': 999999})
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'InvalidInput'

    @pytest.mark.integration
    def test_patch_missing_execution(self, client, db):
        response = client.patch('/api/executions/12345', json={'notes': 'x'})
        assert response.status_code == 404

    @pytest.mark.integration
    def test_list_and_stats(self, client, staffed_catalog):
        _, _, action = staffed_catalog
        client.put('/api/executions', json={
            'actionId': action.id, 'machineId': action.machine_id, 'scheduledDate': '2025-06-01',
        })

        records = json.loads(client.get('/api/executions?from=2025-06-01&to=2025-06-30').data)
        assert len(records) == 1

        stats = json.loads(client.get(f'/api/executions/stats?machineId={action.machine_id}&asOf=2025-06-30').data)
        assert stats[0]['totalCompleted'] == 1
        assert stats[0]['plannedOccurrences'] == 6
