"""
HTTP routing and behavior for the application,
separated from app.py for testing purposes.
"""

import atexit
from dataclasses import asdict
from datetime import datetime, timezone

from flask import Flask, Response, jsonify, request

from assignment_store import AssignmentStore
from cache_strategy import CacheStrategy, get_cache_strategy, schedule_cache_key
from config import Config
from match_fetcher import (ScheduleResult, fetch_events, fetch_schedule,
                           upcoming_matches)
from match_filters import divisions, filter_matches
from rotation_planner import AutoAssignRefused, RotationPlanner
from schedule_refresher import ScheduleRefresher
from schema import AppSettings, Battery, BatteryComment
from storage_strategy import get_storage_strategy
from tba_client import TBAClient
from usage_report import render_report

DEFAULT_VOLTAGE = 12.8
DEFAULT_CAPACITY = 18.0


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_filled_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def create_app(
        testing: bool,
        config: Config | None = None
) -> tuple[Flask, AssignmentStore, CacheStrategy]:
    """Initiate and get the "global" objects for the Flask app."""

    app = Flask(__name__)
    config = config or Config.from_env()

    store = AssignmentStore(get_storage_strategy(None if testing else app))
    cache_strategy: CacheStrategy = get_cache_strategy(
        None if testing else app)
    planner = RotationPlanner(store)

    def client() -> TBAClient:
        return TBAClient(store.settings.api_key, config)

    refresher = ScheduleRefresher(
        lambda team, event: fetch_schedule(client(), team, event),
        cache_strategy, config.refresh_interval)
    app.extensions['schedule_refresher'] = refresher
    if not testing:
        # runs for the life of the process, whether served by app.run or WSGI
        refresher.start(lambda: (store.settings.team_number,
                                 store.settings.event_code))
        atexit.register(refresher.stop)

    def current_schedule(force: bool = False) -> ScheduleResult:
        """Latest schedule for the team/event in the query or settings."""

        team = request.args.get('team') or store.settings.team_number
        event = request.args.get('event') or store.settings.event_code
        if not team or not event:
            return ScheduleResult()

        key = schedule_cache_key(team, event)
        result = None if force else cache_strategy.retrieve(key)
        if result is None:
            result = refresher.refresh(team, event)
        if result is None:
            # superseded by a newer fetch that has already finished
            result = cache_strategy.retrieve(key) or ScheduleResult()
        return result

    def rotation_state():
        planner.refresh(current_schedule().matches, store.assignments)
        return jsonify({
            'order': planner.order,
            'preview': planner.preview,
            'unassigned': [m.id for m in planner.unassigned_matches]
        })

    @app.route('/batteries', methods=['GET'])
    def list_batteries():
        return jsonify(store.batteries)

    @app.route('/batteries', methods=['POST'])
    def add_battery():
        """
        HTTP POST method to add a battery to the roster.

        Args:
            request.json (dict): id, and optionally voltage, capacity, brand.

        Returns:
            tuple(battery, 201) on success, 400 with a message otherwise.
        """

        data = request.json

        if not 'id' in data or not _is_filled_str(data['id']):
            return jsonify({'message': 'Missing or wrong type for id'}), 400
        voltage = data.get('voltage', DEFAULT_VOLTAGE)
        if not _is_number(voltage):
            return jsonify({'message': 'Voltage must be a number'}), 400
        capacity = data.get('capacity', DEFAULT_CAPACITY)
        if not _is_number(capacity):
            return jsonify({'message': 'Capacity must be a number'}), 400
        brand = data.get('brand', None)
        if brand is not None and not isinstance(brand, str):
            return jsonify({'message': 'Brand must be a string'}), 400

        battery = Battery(id=data['id'].strip(),
                          voltage=float(voltage),
                          capacity=float(capacity),
                          brand=brand.strip() if brand and brand.strip() else
                          None,
                          date_added=datetime.now(timezone.utc).isoformat())

        if not store.add_battery(battery):
            return jsonify({'message': 'Battery already exists'}), 400
        return jsonify(battery), 201

    @app.route('/batteries/<string:battery_id>', methods=['DELETE'])
    def remove_battery(battery_id):
        """Remove a battery and every assignment that uses it."""

        if not store.remove_battery(battery_id):
            return jsonify({'message': 'Battery not found'}), 404
        planner.remove(battery_id)
        return '', 204

    @app.route('/batteries/<string:battery_id>/faulty', methods=['PUT'])
    def set_faulty(battery_id):
        data = request.json
        if not isinstance(data.get('is_faulty', None), bool):
            return jsonify({'message': 'is_faulty must be true or false'}), 400
        if not store.set_faulty(battery_id, data['is_faulty']):
            return jsonify({'message': 'Battery not found'}), 404
        if data['is_faulty']:
            planner.remove(battery_id)
        return '', 204

    @app.route('/batteries/<string:battery_id>/comments', methods=['GET'])
    def list_comments(battery_id):
        if not store.get_battery(battery_id):
            return jsonify({'message': 'Battery not found'}), 404
        return jsonify(store.comments_for(battery_id))

    @app.route('/batteries/<string:battery_id>/comments', methods=['POST'])
    def add_comment(battery_id):
        data = request.json
        if not 'match_id' in data or not isinstance(data['match_id'], str):
            return jsonify({'message':
                            'Missing or wrong type for match_id'}), 400
        if not 'text' in data or not _is_filled_str(data['text']):
            return jsonify({'message': 'Missing or wrong type for text'}), 400

        comment = BatteryComment(
            match_id=data['match_id'],
            text=data['text'],
            timestamp=datetime.now(timezone.utc).isoformat())
        if not store.append_comment(battery_id, comment):
            return jsonify({'message': 'Battery not found'}), 404
        return jsonify(comment), 201

    @app.route('/batteries/<string:battery_id>/assignments', methods=['GET'])
    def battery_assignments(battery_id):
        if not store.get_battery(battery_id):
            return jsonify({'message': 'Battery not found'}), 404
        return jsonify(store.assignments_for_battery(battery_id))

    @app.route('/assignments', methods=['GET'])
    def list_assignments():
        return jsonify(store.assignments)

    @app.route('/assignments/<string:match_id>', methods=['PUT'])
    def assign(match_id):
        """
        HTTP PUT method to assign a battery to a match.

        Replaces any battery already assigned to the match.

        Args:
            request.json (dict): battery_id, and optionally a comment

        Returns:
            The new assignment, or 404 when the battery is not on the roster.
        """

        data = request.json
        if not 'battery_id' in data or not _is_filled_str(data['battery_id']):
            return jsonify({'message':
                            'Missing or wrong type for battery_id'}), 400
        comment = data.get('comment', None)
        if comment is not None and not isinstance(comment, str):
            return jsonify({'message': 'Comment must be a string'}), 400

        assignment = store.assign(match_id, data['battery_id'])
        if assignment is None:
            return jsonify({'message': 'Battery not found'}), 404
        if comment and comment.strip():
            store.append_comment(
                data['battery_id'],
                BatteryComment(match_id=match_id,
                               text=comment,
                               timestamp=assignment.timestamp))
        return jsonify(assignment)

    @app.route('/assignments/<string:match_id>', methods=['DELETE'])
    def unassign(match_id):
        store.unassign(match_id)
        return '', 204

    @app.route('/settings', methods=['GET'])
    def get_settings():
        return jsonify(store.settings)

    @app.route('/settings', methods=['PUT'])
    def update_settings():
        data = request.json
        current = asdict(store.settings)
        for name in ('team_number', 'event_code', 'api_key'):
            if name in data and not isinstance(data[name], str):
                return jsonify({'message': f'{name} must be a string'}), 400
        if 'dark_mode' in data and not isinstance(data['dark_mode'], bool):
            return jsonify({'message': 'dark_mode must be true or false'}), 400

        old = store.settings
        current.update({k: v for k, v in data.items() if k in current})
        store.update_settings(AppSettings(**current))
        if old.team_number and old.event_code:
            cache_strategy.invalidate(
                schedule_cache_key(old.team_number, old.event_code))
        return jsonify(store.settings)

    @app.route('/matches', methods=['GET'])
    def list_matches():
        """
        HTTP GET method for the schedule of a team at an event.

        Args:
            request.args: team/event (default: settings), refresh,
                search, status and type filters.

        Returns:
            matches plus an error banner message when mock data is shown.
        """

        result = current_schedule(force=request.args.get('refresh') == '1')
        matches = filter_matches(result.matches,
                                 store.assignments,
                                 search=request.args.get('search', ''),
                                 status=request.args.get('status', 'all'),
                                 match_type=request.args.get('type', 'all'))
        return jsonify({
            'matches': matches,
            'divisions': divisions(result.matches),
            'team_division': result.team_division,
            'error': result.error
        })

    @app.route('/matches/upcoming', methods=['GET'])
    def list_upcoming_matches():
        result = current_schedule()
        return jsonify(upcoming_matches(result.matches, store.assignments))

    @app.route('/events', methods=['GET'])
    def list_events():
        return jsonify(fetch_events(client(), request.args.get('team')))

    @app.route('/rotation', methods=['GET'])
    def get_rotation():
        return rotation_state()

    @app.route('/rotation/<string:battery_id>', methods=['POST'])
    def add_to_rotation(battery_id):
        battery = store.get_battery(battery_id)
        if not battery:
            return jsonify({'message': 'Battery not found'}), 404
        if battery.is_faulty:
            return jsonify({'message':
                            'Faulty batteries cannot join the rotation'}), 400
        planner.append(battery_id)
        return rotation_state()

    @app.route('/rotation/<string:battery_id>', methods=['DELETE'])
    def remove_from_rotation(battery_id):
        planner.remove(battery_id)
        return rotation_state()

    @app.route('/rotation/order', methods=['PUT'])
    def reorder_rotation():
        data = request.json
        from_index = data.get('from_index', None)
        to_index = data.get('to_index', None)
        if not isinstance(from_index, int) or not isinstance(to_index, int):
            return jsonify({'message':
                            'from_index and to_index must be integers'}), 400
        try:
            planner.reorder(from_index, to_index)
        except IndexError as e:
            return jsonify({'message': str(e)}), 400
        return rotation_state()

    @app.route('/rotation/preview', methods=['GET'])
    def rotation_preview():
        planner.refresh(current_schedule().matches, store.assignments)
        return jsonify(planner.preview)

    @app.route('/rotation/commit', methods=['POST'])
    def commit_rotation():
        planner.refresh(current_schedule().matches, store.assignments)
        try:
            committed = planner.commit()
        except AutoAssignRefused as e:
            return jsonify({'message': str(e)}), 400
        return jsonify({'assigned': committed})

    @app.route('/stats', methods=['GET'])
    def stats():
        return jsonify(store.stats())

    @app.route('/export/<string:fmt>', methods=['GET'])
    def export(fmt):
        content, filename, mimetype = render_report(fmt, store.batteries,
                                                    store.assignments)
        return Response(
            content,
            mimetype=mimetype,
            headers={'Content-Disposition': f'attachment; filename={filename}'})

    # TODO: block this behind an environment flag
    @app.route('/debug', methods=['GET'])
    def debug():
        """
        HTTP GET method to get debug information.

        This is not meant to be reachable in production.
        """

        return jsonify({
            'storage': store.storage.debug_info(),
            'cache': cache_strategy.debug_info(),
            'refresher_running': refresher.running
        })

    return app, store, cache_strategy
