"""
Asset repository: every read and write of the assets table goes through here.

Functions that write take ``commit``; pass ``commit=False`` to fold the write
into a caller-owned transaction.
"""
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..logging_config import db_logger
from ..models.asset import Asset
from ..models.enums import AssetSource, ProcessingStatus
from .exceptions import AssetOwnershipError

ASSET_FIELDS = (
    "url", "type", "source", "order", "file_name", "file_size",
    "mime_type", "width", "height", "duration",
)


def _finish(db: Session, commit: bool) -> None:
    if commit:
        db.commit()
    else:
        db.flush()


def _build(post_id: str, data: Dict, default_order: int = 0) -> Asset:
    values = {key: data.get(key) for key in ASSET_FIELDS}
    if values["order"] is None:
        values["order"] = default_order
    for key in ("type", "source"):
        if hasattr(values[key], "value"):
            values[key] = values[key].value
    return Asset(post_id=post_id, processing_status=ProcessingStatus.COMPLETED.value, **values)


def create_asset(db: Session, post_id: str, data: Dict, commit: bool = True) -> Asset:
    """Create a single asset. ``data`` holds url/type/source and optional metadata."""
    asset = _build(post_id, data)
    db.add(asset)
    _finish(db, commit)
    if commit:
        db.refresh(asset)
    return asset


def create_assets(db: Session, post_id: str, items: List[Dict], commit: bool = True) -> List[Asset]:
    """Batch create; items without an explicit order take their list position. Returns the new rows."""
    assets = [_build(post_id, data, default_order=index) for index, data in enumerate(items)]
    db.add_all(assets)
    _finish(db, commit)
    db_logger.debug("Assets created", post_id=post_id, count=len(assets))
    return assets


def get_asset(db: Session, asset_id: int) -> Optional[Asset]:
    return db.query(Asset).filter(Asset.id == asset_id).first()


def list_for_post(db: Session, post_id: str, source: Optional[AssetSource] = None) -> List[Asset]:
    """Assets for a post by display order; insertion order breaks ties."""
    query = db.query(Asset).filter(Asset.post_id == post_id)
    if source is not None:
        query = query.filter(Asset.source == AssetSource(source).value)
    return query.order_by(Asset.order.asc(), Asset.id.asc()).all()


def max_order(db: Session, post_id: str) -> Optional[int]:
    """Highest order value in use for the post, or None when it has no assets."""
    return db.query(func.max(Asset.order)).filter(Asset.post_id == post_id).scalar()


def delete_asset(db: Session, asset: Asset, commit: bool = True) -> None:
    db.delete(asset)
    _finish(db, commit)


def delete_for_post(db: Session, post_id: str, commit: bool = True) -> int:
    count = db.query(Asset).filter(Asset.post_id == post_id).delete(synchronize_session="fetch")
    _finish(db, commit)
    return count


def delete_by_source(db: Session, post_id: str, source: AssetSource, commit: bool = True) -> int:
    """Remove every asset of one source, e.g. before regenerating AI content."""
    count = (
        db.query(Asset)
        .filter(Asset.post_id == post_id, Asset.source == AssetSource(source).value)
        .delete(synchronize_session="fetch")
    )
    _finish(db, commit)
    db_logger.info("Assets purged", post_id=post_id, source=AssetSource(source).value, count=count)
    return count


def reorder_assets(db: Session, post_id: str, asset_ids: List[int]) -> List[Asset]:
    """Assign orders 0..n-1 following ``asset_ids``, all or nothing."""
    assets = {a.id: a for a in db.query(Asset).filter(Asset.id.in_(asset_ids)).all()}
    try:
        for index, asset_id in enumerate(asset_ids):
            asset = assets.get(asset_id)
            if asset is None or asset.post_id != post_id:
                raise AssetOwnershipError(str(asset_id), post_id)
            asset.order = index
        db.commit()
    except Exception:
        db.rollback()
        raise
    return list_for_post(db, post_id)
