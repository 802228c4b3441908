"""HTTP server for location updates and screenshots with security features."""

import base64
import json
import logging
import os
import threading
import time
from http.server import HTTPServer, BaseHTTPRequestHandler
from io import BytesIO
from typing import TYPE_CHECKING, Any, Optional

from .config import validate_coordinates

if TYPE_CHECKING:
    from .config import HttpServerConfig

logger = logging.getLogger(__name__)

# Location messages are a few dozen bytes
MAX_BODY_BYTES = 4096


class RateLimiter:
    """Simple rate limiter using token bucket algorithm."""

    def __init__(self, rate_per_second: int = 10):
        self.rate = rate_per_second
        self.tokens = rate_per_second
        self.last_update = time.time()
        self.lock = threading.Lock()

    def allow(self) -> bool:
        """Check if request is allowed. Returns True if allowed."""
        with self.lock:
            now = time.time()
            elapsed = now - self.last_update
            self.tokens = min(self.rate, self.tokens + elapsed * self.rate)
            self.last_update = now

            if self.tokens >= 1:
                self.tokens -= 1
                return True
            return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_location_message(data: Any) -> tuple[Optional[tuple[float, float, int]], list[str]]:
    """
    Validate a location message body.

    Args:
        data: Decoded JSON body

    Returns:
        ((latitude, longitude, utc_offset), []) if valid,
        otherwise (None, list of errors)
    """
    if not isinstance(data, dict):
        return None, ["Body must be a JSON object"]

    errors = []
    for key in ("latitude", "longitude", "utc_offset"):
        if key not in data:
            errors.append(f"Missing '{key}'")
        elif not _is_number(data[key]):
            errors.append(f"'{key}' must be a number")
    if errors:
        return None, errors

    if data["utc_offset"] != int(data["utc_offset"]):
        return None, ["'utc_offset' must be a whole number of seconds"]

    latitude = float(data["latitude"])
    longitude = float(data["longitude"])
    utc_offset = int(data["utc_offset"])
    errors = validate_coordinates(latitude, longitude, utc_offset)
    if errors:
        return None, errors
    return (latitude, longitude, utc_offset), []


class ClockRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for location updates and screenshots."""

    # Class-level references (set by server)
    clock_instance = None
    rate_limiter: Optional[RateLimiter] = None
    auth_credentials: Optional[tuple[str, str]] = None  # (user, pass)

    def log_message(self, format: str, *args) -> None:
        """Override to use proper logging."""
        logger.debug(f"{self.client_address[0]} - {format % args}")

    def _check_auth(self) -> bool:
        """Check basic auth if configured. Returns True if allowed."""
        if self.auth_credentials is None:
            return True

        auth_header = self.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Basic "):
            return False

        try:
            encoded = auth_header[6:]
            decoded = base64.b64decode(encoded).decode("utf-8")
            user, password = decoded.split(":", 1)
            return (user, password) == self.auth_credentials
        except (ValueError, UnicodeDecodeError):
            return False

    def _send_unauthorized(self) -> None:
        """Send 401 Unauthorized response."""
        self.send_response(401)
        self.send_header("WWW-Authenticate", 'Basic realm="Twilight Clock"')
        self.send_header("Content-Type", "text/plain")
        self.end_headers()
        self.wfile.write(b"Unauthorized")

    def _send_rate_limited(self) -> None:
        """Send 429 Too Many Requests response."""
        self.send_response(429)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Retry-After", "1")
        self.end_headers()
        self.wfile.write(b"Too Many Requests")

    def _send_text(self, status: int, text: str) -> None:
        """Send a text response."""
        self.send_response(status)
        self.send_header("Content-Type", "text/plain")
        self.end_headers()
        self.wfile.write(text.encode("utf-8"))

    def _send_json(self, status: int, payload: dict) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_png(self, image_data: bytes) -> None:
        """Send a PNG image response."""
        self.send_response(200)
        self.send_header("Content-Type", "image/png")
        self.send_header("Content-Length", str(len(image_data)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.write(image_data)

    def _admit(self) -> bool:
        """Apply rate limiting and authentication. Returns True if allowed."""
        if self.rate_limiter and not self.rate_limiter.allow():
            self._send_rate_limited()
            return False

        if not self._check_auth():
            self._send_unauthorized()
            return False

        if self.clock_instance is None and self._route() != "/health":
            self._send_text(503, "Clock not initialized")
            return False
        return True

    def _route(self) -> str:
        return self.path.split("?", 1)[0].lower()

    def do_GET(self) -> None:
        """Handle GET requests."""
        if not self._admit():
            return

        path = self._route()

        if path == "/health":
            self._send_text(200, "OK")

        elif path == "/screenshot":
            # Bands are only ever rendered on the main loop
            try:
                frame = self.clock_instance.get_last_frame()
                if frame is None:
                    self._send_text(503, "No frame available")
                    return

                buffer = BytesIO()
                frame.save(buffer, format="PNG")
                self._send_png(buffer.getvalue())
            except (OSError, ValueError) as e:
                logger.error(f"Screenshot error: {e}")
                self._send_text(500, f"Error: {e}")

        elif path == "/location":
            location = self.clock_instance.location_provider.get()
            if location is None:
                self._send_text(404, "No location available")
                return
            self._send_json(
                200,
                {
                    "latitude": location.latitude,
                    "longitude": location.longitude,
                    "utc_offset": location.utc_offset,
                    "last_update": location.last_update,
                },
            )

        else:
            self._send_text(404, "Not Found")

    def do_POST(self) -> None:
        """Handle POST requests."""
        if not self._admit():
            return

        if self._route() != "/location":
            self._send_text(404, "Not Found")
            return

        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            self._send_text(400, "Invalid Content-Length")
            return
        if length <= 0 or length > MAX_BODY_BYTES:
            self._send_text(400, "Body missing or too large")
            return

        try:
            data = json.loads(self.rfile.read(length).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self._send_text(400, f"Invalid JSON: {e}")
            return

        values, errors = parse_location_message(data)
        if values is None:
            logger.warning(f"Rejected location message: {'; '.join(errors)}")
            self._send_text(400, "\n".join(errors))
            return

        self.clock_instance.queue_location(*values)
        self._send_text(202, "Accepted")


def create_server(
    config: "HttpServerConfig",
    clock_instance,
) -> Optional[HTTPServer]:
    """
    Create and configure the HTTP server.

    Args:
        config: HTTP server configuration
        clock_instance: Reference to main clock instance

    Returns:
        Configured HTTPServer, or None if disabled
    """
    if not config.enabled:
        logger.info("HTTP server disabled in config")
        return None

    ClockRequestHandler.clock_instance = clock_instance
    ClockRequestHandler.rate_limiter = RateLimiter(config.rate_limit_per_second)

    auth_user = os.environ.get("HTTP_AUTH_USER")
    auth_pass = os.environ.get("HTTP_AUTH_PASS")
    if auth_user and auth_pass:
        ClockRequestHandler.auth_credentials = (auth_user, auth_pass)
        logger.info("HTTP Basic Auth enabled")
    else:
        ClockRequestHandler.auth_credentials = None

    bind_address = (config.bind_address, config.port)
    server = HTTPServer(bind_address, ClockRequestHandler)

    logger.info(f"HTTP server configured on {config.bind_address}:{config.port}")

    if config.bind_address == "0.0.0.0":
        logger.warning(
            "HTTP server bound to all interfaces (0.0.0.0). "
            "Consider using 127.0.0.1 for local-only access."
        )

    return server


def start_server_thread(server: HTTPServer) -> threading.Thread:
    """
    Start the HTTP server in a daemon thread.

    Args:
        server: HTTPServer instance to run

    Returns:
        The daemon thread running the server
    """
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info("HTTP server thread started")
    return thread
