"""Channel hand-off: builds the click-to-chat link and asks the host to open it."""

import logging
import webbrowser
from urllib.parse import quote

from sosalert.application.dto import HandoffRequested
from sosalert.application.ports import UriOpener
from sosalert.domain import FormatError
from sosalert.infrastructure.phone import mask_phone, normalize_phone, whatsapp_id

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_URL = "https://wa.me/"

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_uri(destination: str, message: str, base_url: str = DEFAULT_CHANNEL_URL) -> str:
    """Return base_url + destination + "?text=" + percent-encoded message."""
    target = whatsapp_id(destination)
    if not target:
        raise FormatError("Hand-off destination must be non-empty.")
    text = quote(message, safe=_URI_COMPONENT_SAFE)
    return f"{base_url}{target}?text={text}"


class BrowserOpener:
    """Opens the link in a new browser tab (desktop/CLI host)."""

    def open(self, uri: str) -> bool:
        try:
            return webbrowser.open_new_tab(uri)
        except webbrowser.Error as e:
            logger.warning("Browser could not open hand-off link: %s", e)
            return False


class RecordingOpener:
    """Keeps requested links instead of opening them; the caller hands them to its client."""

    def __init__(self, accept: bool = True) -> None:
        self.opened: list[str] = []
        self._accept = accept

    def open(self, uri: str) -> bool:
        self.opened.append(uri)
        return self._accept


class ChannelHandoff:
    """Requests the external messaging app to open with destination and message."""

    def __init__(self, opener: UriOpener, base_url: str = DEFAULT_CHANNEL_URL) -> None:
        self._opener = opener
        self._base_url = base_url

    def open(self, destination: str, message: str) -> HandoffRequested:
        """Raise FormatError if destination is empty; otherwise request the hand-off."""
        if not (destination or "").strip():
            raise FormatError("Hand-off destination must be non-empty.")
        if normalize_phone(destination) is None:
            logger.warning(
                "Hand-off destination %s does not parse as a phone number; opening anyway",
                mask_phone(destination),
            )
        uri = build_uri(destination, message, self._base_url)
        opened = bool(self._opener.open(uri))
        logger.info("Hand-off requested to %s (opened=%s)", mask_phone(destination), opened)
        return HandoffRequested(uri=uri, opened=opened)
