"""
SMS transport
Posts form-encoded messages to the e8d.tw HTTP gateway.
"""

import logging
import requests

from utils import mask_phone

logger = logging.getLogger("main")


class SmsDeliveryError(Exception):
    """The gateway did not accept the message"""


class SmsTransport:
    def __init__(self, api_url, uid, pwd, timeout=10, session=None):
        self.api_url = api_url
        self.uid = uid
        self.pwd = pwd
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings):
        sms = settings["sms"]
        return cls(
            api_url=sms["api_url"],
            uid=sms.get("uid", ""),
            pwd=sms.get("pwd", ""),
            timeout=sms.get("timeout_seconds", 10),
        )

    def send(self, message, dest, subject=None):
        """
        Send one SMS.

        Args:
            message: Message body
            dest: Destination number, e.g. "0912345678"
            subject: Internal note, not delivered to the handset

        Returns:
            Raw gateway response text

        Raises:
            SmsDeliveryError: non-2xx status, timeout or connection failure
        """
        form = {"UID": self.uid, "PWD": self.pwd, "MSG": message, "DEST": dest}
        if subject is not None:
            form["SB"] = subject

        try:
            resp = self.session.post(self.api_url, data=form, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"SMS gateway timed out after {self.timeout}s")
            raise SmsDeliveryError("SMS gateway timed out") from e
        except requests.RequestException as e:
            logger.error(f"SMS gateway request failed: {e}")
            raise SmsDeliveryError(str(e)) from e

        # Gateways answer in plain text, not JSON
        text = resp.text
        if not resp.ok:
            logger.error(f"SMS gateway returned HTTP {resp.status_code}: {text}")
            raise SmsDeliveryError(f"SMS gateway returned HTTP {resp.status_code}")

        logger.info(f"SMS sent to {mask_phone(dest)}")
        return text
