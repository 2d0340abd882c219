"""JSON-based repository for land-base campaigns."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from landbase import savegame
from landbase.domain import models as dm
from landbase.domain.rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)

_SNAPSHOT_NAME = re.compile(r"campaign_(\d+)\.json")


class JsonCampaignRepository:
    """Persist campaigns as JSON save manifests on disk.

    Each campaign lives in ``campaign_<id>.json``.  Whole campaigns can also be
    exported to and imported from ``.landbase`` archives, which carry the same
    manifest plus metadata.
    """

    def __init__(self, base_path: Path, *, rules: RulesConfig = DEFAULT_RULES) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._rules = rules

    def _path_for(self, campaign_id: dm.CampaignID) -> Path:
        return self.base_path / f"campaign_{int(campaign_id)}.json"

    def save(self, campaign: dm.Campaign) -> Path:
        """Write the campaign snapshot, replacing any previous one."""

        path = self._path_for(campaign.id)
        staging = path.with_suffix(".json.tmp")
        staging.write_text(
            savegame.export_campaign(campaign).model_dump_json(indent=2), encoding="utf-8"
        )
        staging.replace(path)
        return path

    def load(self, campaign_id: dm.CampaignID) -> dm.Campaign:
        return self.restore(campaign_id).campaign

    def restore(self, campaign_id: dm.CampaignID) -> savegame.RestoredCampaign:
        """Load a snapshot and report how its airbases were reconnected."""

        path = self._path_for(campaign_id)
        if not path.exists():
            raise FileNotFoundError(f"campaign {int(campaign_id)} not found")
        manifest = savegame.SaveManifest.model_validate_json(path.read_bytes())
        restored = savegame.restore_campaign(manifest, rules=self._rules)
        if restored.mismatch_count:
            logger.warning(
                "campaign %d loaded with %d dropped unit reference(s)",
                int(campaign_id),
                restored.mismatch_count,
            )
        return restored

    def list_campaigns(self) -> list[dm.CampaignID]:
        ids: list[dm.CampaignID] = []
        for path in self.base_path.iterdir():
            match = _SNAPSHOT_NAME.fullmatch(path.name)
            if match is not None:
                ids.append(dm.CampaignID(int(match.group(1))))
        return sorted(ids, key=int)

    def delete(self, campaign_id: dm.CampaignID) -> None:
        self._path_for(campaign_id).unlink(missing_ok=True)

    def next_identifier(self) -> dm.CampaignID:
        existing = self.list_campaigns()
        return dm.CampaignID(int(existing[-1]) + 1 if existing else 1)

    # -- archives --------------------------------------------------------------

    def export_archive(
        self,
        campaign_id: dm.CampaignID,
        target: Path,
        *,
        kind: savegame.SaveKind = savegame.SaveKind.SAVE,
        author: str | None = None,
    ) -> Path:
        """Package a stored campaign as a ``.landbase`` archive at ``target``."""

        campaign = self.load(campaign_id)
        metadata = savegame.SaveMetadata(name=campaign.name, author=author)
        manifest = savegame.export_campaign(campaign, kind=kind, metadata=metadata)
        return savegame.save_manifest(manifest, target)

    def import_archive(self, source: Path) -> savegame.RestoredCampaign:
        """Store the campaign from an archive under a fresh identifier."""

        manifest = savegame.load_manifest(source)
        manifest.campaign_id = int(self.next_identifier())
        restored = savegame.restore_campaign(manifest, rules=self._rules)
        self.save(restored.campaign)
        logger.info(
            "imported %s as campaign %d", source.name, int(restored.campaign.id)
        )
        return restored
