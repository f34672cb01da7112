from flask import (
    Blueprint,
    abort,
    current_app,
    jsonify,
    request,
    send_file,
)
import io

from app.dates import parse_date
from app.export import EXPORT_FORMATS, export_records
from app.pipeline import DashboardParams
from app.store import FetchError

main_bp = Blueprint('main', __name__)


def _get_store():
    store = current_app.config.get("SNAPSHOT_STORE")
    if not store:
        abort(503, description="Data store unavailable")
    return store


def _date_arg(name: str) -> str:
    """Return the ISO form of a date query argument, or ``''`` when absent.

    Arguments follow the same UTC parsing as record dates, so an offset
    timestamp selects its UTC calendar day.
    """

    raw = request.args.get(name)
    if not raw or not raw.strip():
        return ''
    parsed = parse_date(raw)
    if not parsed:
        abort(400, description='Invalid date')
    return parsed.isoformat()


def _dashboard_params() -> DashboardParams:
    return DashboardParams.from_values(
        start=_date_arg('start_date'),
        end=_date_arg('end_date'),
        operators=request.args.getlist('operator'),
        models=request.args.getlist('model'),
    )


def _fetch_error_response(exc: FetchError):
    current_app.logger.error("Dashboard data unavailable: %s", exc)
    return jsonify({'message': str(exc)}), 502


@main_bp.route('/api/dashboard', methods=['GET'])
def api_dashboard():
    """Return detail rows, per-model totals, trend and summary for the filters."""

    params = _dashboard_params()
    try:
        payload = _get_store().view(params)
    except FetchError as exc:
        return _fetch_error_response(exc)
    return jsonify(payload)


@main_bp.route('/api/dashboard/options', methods=['GET'])
def api_dashboard_options():
    """Return the selectable operators and models and the default date range."""

    try:
        options = _get_store().options()
    except FetchError as exc:
        return _fetch_error_response(exc)
    return jsonify(options)


@main_bp.route('/api/dataset/reload', methods=['POST'])
def reload_dataset():
    try:
        snapshot = _get_store().reload()
    except FetchError as exc:
        return _fetch_error_response(exc)
    return jsonify(
        {
            'production': len(snapshot.production),
            'rejections': len(snapshot.rejections),
        }
    )


@main_bp.route('/api/dashboard/export', methods=['GET'])
def export_dashboard():
    fmt = request.args.get('format') or 'csv'
    if fmt not in EXPORT_FORMATS:
        return jsonify({'message': 'Unsupported format. Choose csv or xlsx.'}), 400

    params = _dashboard_params()
    store = _get_store()
    try:
        payload = store.view(params)
        start, end = params.start, params.end
        if not start or not end:
            # Open bounds are named after the data's own date range.
            options = store.options()
            start = start or options['start']
            end = end or options['end']
    except FetchError as exc:
        return _fetch_error_response(exc)

    start_str = start.replace('-', '')[2:]
    end_str = end.replace('-', '')[2:]
    filename_stem = f"{start_str}_{end_str}_produccion"
    return send_file(
        io.BytesIO(export_records(payload['records'], fmt)),
        mimetype=EXPORT_FORMATS[fmt],
        download_name=f"{filename_stem}.{fmt}",
        as_attachment=True,
    )
