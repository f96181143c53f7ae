"""
UCI Machine Learning Repository から Bike Sharing Dataset を取得
取得済みのファイルがあれば再ダウンロードしない
"""
import io
import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

import requests

logger = logging.getLogger(__name__)


class BikeshareFetcher:
    """
    Bike Sharing Dataset (day.csv) をダウンロードするクラス
    """

    DATASET_URL = "https://archive.ics.uci.edu/static/public/275/bike+sharing+dataset.zip"
    MEMBER_NAME = "day.csv"

    def __init__(self,
                 data_dir: Union[str, Path] = 'data',
                 timeout: float = 30.0):
        """
        Args:
            data_dir: 保存先ディレクトリ
            timeout: リクエストのタイムアウト（秒）
        """
        self.data_dir = Path(data_dir)
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'bikeshare-eda/0.1'
        })
        logger.info(f"BikeshareFetcher initialized (data_dir={self.data_dir})")

    @property
    def target_path(self) -> Path:
        return self.data_dir / self.MEMBER_NAME

    def fetch(self, force: bool = False) -> Optional[Path]:
        """
        day.csv を取得してパスを返す

        Args:
            force: 既存ファイルがあっても再取得する

        Returns:
            保存したファイルのパス。取得に失敗した場合は None
        """
        if self.target_path.exists() and not force:
            logger.info(f"Using cached dataset at {self.target_path}")
            return self.target_path

        try:
            logger.info(f"Downloading {self.DATASET_URL}")
            response = self.session.get(self.DATASET_URL, timeout=self.timeout)

            if response.status_code != 200:
                logger.error(f"HTTP Error {response.status_code}")
                return None

            return self._extract(response.content)

        except requests.exceptions.Timeout:
            logger.error(f"Timeout while downloading {self.DATASET_URL}")
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {e}")
            return None
        except zipfile.BadZipFile as e:
            logger.error(f"Downloaded archive is not a valid zip: {e}")
            return None

    def _extract(self, content: bytes) -> Optional[Path]:
        """zipアーカイブから day.csv を取り出して保存"""
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            members = [n for n in archive.namelist() if Path(n).name == self.MEMBER_NAME]
            if not members:
                logger.error(f"{self.MEMBER_NAME} not found in archive")
                return None

            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.target_path.write_bytes(archive.read(members[0]))

        logger.info(f"Saved dataset to {self.target_path}")
        return self.target_path
