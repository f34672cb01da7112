import requests

DEFAULT_API_URL = "http://localhost:3000/api/data"


def fetch_dataset(url: str = DEFAULT_API_URL, session=None):
    """Retrieve the raw production and rejection lists from the data API.

    Returns:
        tuple[dict | None, str | None]: (data, error). ``data`` always has
        ``production`` and ``rejections`` keys; missing keys become empty
        lists.  No retry is attempted.
    """
    http = session or requests
    try:
        response = http.get(url)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.JSONDecodeError as exc:
        return None, f"Invalid production data payload: {exc}"
    except requests.RequestException as exc:
        return None, f"Failed to fetch production data: {exc}"
    except ValueError as exc:
        return None, f"Invalid production data payload: {exc}"

    if not isinstance(payload, dict):
        return None, "Invalid production data payload: expected a JSON object"

    return {
        "production": payload.get("production") or [],
        "rejections": payload.get("rejections") or [],
    }, None
