# downloaders/ftp_downloader.py
import io
import ftplib
import logging
import posixpath
from typing import List, Optional
from ..config import RadarConfig
from ..exceptions import SourceUnavailable, TransferError

class BOMFtpSource:
    """Reads radar and satellite frames from the anonymous BOM FTP server.

    Sessions are plain ``ftplib.FTP`` objects and are meant to be used as
    context managers, one per high level operation::

        with source.open_session() as session:
            paths = source.list_frames(session, "/anon/gen/radar", "IDR703", ".png")

    Listings come back in server order; callers sort.
    """

    def __init__(self, config: RadarConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def open_session(self) -> ftplib.FTP:
        """Connect and log in anonymously"""
        session = ftplib.FTP()
        try:
            session.connect(self.config.ftp_host, self.config.ftp_port)
            session.login("anonymous", "anonymous")
        except ftplib.all_errors as e:
            session.close()
            self.logger.error(f"Error connecting to {self.config.ftp_host}: {e}")
            raise SourceUnavailable(f"Failed to open FTP session to {self.config.ftp_host}: {e}") from e

        self.logger.debug(f"Opened FTP session to {self.config.ftp_host}:{self.config.ftp_port}")
        return session

    def list_frames(self, session: ftplib.FTP, directory: str, id_prefix: str,
                    extension: str) -> List[str]:
        """List files in `directory` whose basename starts with `id_prefix` and ends with `extension`"""
        try:
            entries = session.nlst(directory)
        except ftplib.error_perm as e:
            # 550 is what servers send for an empty or missing directory
            if str(e).startswith("550"):
                return []
            raise TransferError(f"Failed to list {directory}: {e}") from e
        except ftplib.all_errors as e:
            raise TransferError(f"Failed to list {directory}: {e}") from e

        paths = []
        for entry in entries:
            name = posixpath.basename(entry)
            if name.startswith(id_prefix) and name.endswith(extension):
                paths.append(posixpath.join(directory, name))
        return paths

    def _remote_size(self, session: ftplib.FTP, path: str) -> Optional[int]:
        try:
            session.voidcmd("TYPE I")
            return session.size(path)
        except (ftplib.error_perm, ftplib.error_reply):
            return None

    def fetch_bytes(self, session: ftplib.FTP, path: str) -> bytes:
        """Download a single file into memory"""
        self.logger.info(f"Downloading {path}")
        buffer = io.BytesIO()
        try:
            expected = self._remote_size(session, path)
            session.retrbinary(f"RETR {path}", buffer.write)
        except ftplib.all_errors as e:
            self.logger.error(f"Error downloading {path}: {e}")
            raise TransferError(f"Failed to download {path}: {e}") from e

        data = buffer.getvalue()
        if expected is not None and len(data) != expected:
            raise TransferError(f"Truncated download of {path}: got {len(data)} of {expected} bytes")
        return data
