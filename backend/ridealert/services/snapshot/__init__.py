"""
Live ride snapshot: upstream provider plus a last-known-good cache per park.
The evaluators only ever see the merged LiveSnapshot.
"""
from ridealert.services.snapshot.base import SnapshotProvider
from ridealert.services.snapshot.cache import SnapshotCache
from ridealert.services.snapshot.themeparks_wiki import ThemeParksWikiProvider

__all__ = ["SnapshotCache", "SnapshotProvider", "ThemeParksWikiProvider"]
