import threading
import time
from typing import Callable, Optional

from ..database.entry_store import EntryStore
from ..models.entry import Entry
from .resolver import PreviewResolver
from .slot import PreviewStatus

ProgressCallback = Callable[[int, int, str], None]


class FetchController:
    """
    Background and batch preview downloads.

    At most one background fetch runs at a time: starting a new one signals
    the previous thread and joins it first. Cancellation is cooperative and
    only checked when the thread starts, so a fetch already under way runs
    to completion.
    """
    def __init__(self, resolver: PreviewResolver, store: EntryStore, batch_delay: float = 0.1):
        self.resolver = resolver
        self.store = store
        self.batch_delay = batch_delay

        self._thread: Optional[threading.Thread] = None
        self._fetch_cancel = threading.Event()
        self._batch_cancel = threading.Event()

    # --- Single-flight background fetch --------------------------------------

    def _run_fetch(self, entry: Entry, cancel: threading.Event) -> None:
        if cancel.is_set():
            return
        try:
            self.resolver.fetch_online(entry)
        except Exception as e:
            print(f"❌ Preview fetch failed for {entry.name}: {e}")
            self.resolver.slot.set_status(PreviewStatus.ERROR)

    def fetch_async(self, entry: Entry) -> bool:
        """
        Starts fetching ``entry`` in the background. Returns False if the
        worker thread could not be started.
        """
        previous = self._thread
        if previous is not None and previous.is_alive():
            self._fetch_cancel.set()
            previous.join()

        # Fresh event per job so a late reader of the old one stays cancelled
        self._fetch_cancel = threading.Event()
        self.resolver.slot.set_status(PreviewStatus.LOADING)

        thread = threading.Thread(
            target=self._run_fetch,
            args=(entry, self._fetch_cancel),
            name=f"preview-fetch-{entry.name}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            print(f"❌ Could not start preview fetch: {e}")
            self._thread = None
            self.resolver.slot.set_status(PreviewStatus.ERROR)
            return False

        self._thread = thread
        return True

    def fetch_poll(self) -> bool:
        """True once the current background fetch has finished (or none was started)."""
        thread = self._thread
        return thread is None or not thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> bool:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return self.fetch_poll()

    # --- Batch ----------------------------------------------------------------

    def batch_fetch(self, station_id: int, on_progress: Optional[ProgressCallback] = None) -> int:
        """
        Downloads missing previews for every entry of ``station_id``.
        Returns the number of successful downloads.
        """
        self._batch_cancel.clear()
        station = self.resolver.registry.get(station_id)
        if station is None:
            return 0

        total = self.store.count_for_station(station_id)
        current = 0
        downloaded = 0
        print(f"🚀 Fetching previews for {station.short_name} ({total} entries)")

        for entry in self.store:
            if self._batch_cancel.is_set():
                print(f"⚠️ Batch fetch cancelled after {current}/{total} entries.")
                break
            if entry.station_id != station_id:
                continue

            current += 1
            if self.resolver.cache_exists(entry):
                if on_progress:
                    on_progress(current, total, entry.name)
                continue

            if self.resolver.fetch_online(entry) is PreviewStatus.READY:
                downloaded += 1

            if on_progress:
                on_progress(current, total, entry.name)

            if self.batch_delay > 0:
                time.sleep(self.batch_delay)

        print(f"✅ Batch fetch complete. Downloaded {downloaded} previews.")
        return downloaded

    def batch_cancel(self) -> None:
        self._batch_cancel.set()
