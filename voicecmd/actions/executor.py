"""Local action executor: maps an inferred action onto a URI to open."""

import logging
import re
import webbrowser
from typing import Callable, Dict, Optional
from urllib.parse import quote

from ..errors import ActionUnsupported
from ..models.command import ActionResult, ActionStatus

logger = logging.getLogger(__name__)


WHATSAPP_BASE_URL = "https://wa.me/"


class ActionExecutor:
    """Dispatches on case-insensitive keywords in the action name."""

    def __init__(self, opener: Optional[Callable[[str], object]] = None):
        """Initialize action executor.

        Args:
            opener: Callable that opens a URI; defaults to ``webbrowser.open``
        """
        self.opener = opener or webbrowser.open

    def execute(self, action: str, parameters: Dict[str, str]) -> ActionResult:
        """Run the side effect for ``action``.

        An unmatched action is not an error: it yields an UNSUPPORTED result.
        """
        action_lower = (action or "").lower()
        parameters = parameters or {}

        try:
            if "whatsapp" in action_lower:
                result = self._open_whatsapp(parameters)
            elif "call" in action_lower or "phone" in action_lower:
                result = self._place_call(parameters)
            else:
                raise ActionUnsupported(f'Action "{action}" not recognized or supported.')
        except ActionUnsupported as e:
            logger.info(str(e))
            return ActionResult(status=ActionStatus.UNSUPPORTED, message=str(e))
        except Exception as e:
            logger.error(f"Error executing action '{action}': {e}", exc_info=True)
            return ActionResult(status=ActionStatus.FAILED, message=str(e) or
                                "Failed to execute action due to a system error.")

        log = logger.info if result.executed else logger.warning
        log(f"Action '{action}': {result.message}")
        return result

    def _open_whatsapp(self, parameters: Dict[str, str]) -> ActionResult:
        contact = parameters.get("contact") or parameters.get("number") or ""
        message = parameters.get("message") or ""

        url = WHATSAPP_BASE_URL
        if contact:
            url += re.sub(r"[^0-9]", "", contact)
        if message:
            url += f"?text={quote(message, safe='')}"

        self.opener(url)
        suffix = f" for {contact}" if contact else ""
        return ActionResult(status=ActionStatus.EXECUTED, message=f"Opening WhatsApp{suffix}...", uri=url)

    def _place_call(self, parameters: Dict[str, str]) -> ActionResult:
        contact = parameters.get("contact") or parameters.get("number")
        if not contact:
            return ActionResult(status=ActionStatus.FAILED, message="No contact specified for call.")

        phone_number = re.sub(r"[^0-9+\s()-]", "", contact)
        uri = f"tel:{phone_number}"
        self.opener(uri)
        return ActionResult(status=ActionStatus.EXECUTED, message=f"Calling {contact}...", uri=uri)
