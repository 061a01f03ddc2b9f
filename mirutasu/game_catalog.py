from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from .clock import utcnow
from .models import GameMaster

logger = logging.getLogger(__name__)

GAME_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "fgo",
        "name": "Fate/Grand Order",
        "platform": "mobile",
        "iconUrl": "https://cdn.example.com/fgo-icon.png",
        "dailyTasks": [
            {"id": "login_bonus", "name": "ログインボーナス", "description": "毎日のログインボーナスを受け取る",
             "priority": "medium", "resetTime": "04:00", "category": "login"},
            {"id": "ap_consumption", "name": "AP消化", "description": "AP（アクションポイント）を消化する",
             "priority": "medium", "category": "combat"},
            {"id": "master_mission", "name": "マスターミッション", "description": "週間マスターミッションを進める",
             "priority": "high", "category": "mission"},
        ],
    },
    {
        "id": "genshin",
        "name": "原神",
        "platform": "multi",
        "iconUrl": "https://cdn.example.com/genshin-icon.png",
        "dailyTasks": [
            {"id": "daily_commission", "name": "デイリー任務", "description": "4つのデイリー任務をクリアする",
             "priority": "high", "resetTime": "05:00", "category": "mission"},
            {"id": "resin_consumption", "name": "樹脂消化", "description": "天然樹脂を消化する（上限160）",
             "priority": "medium", "category": "resource"},
            {"id": "realm_currency", "name": "洞天宝銭回収", "description": "塵歌壺の洞天宝銭を回収する",
             "priority": "low", "resetTime": "05:00", "category": "collection"},
        ],
    },
    {
        "id": "umamusume",
        "name": "ウマ娘 プリティーダービー",
        "platform": "mobile",
        "iconUrl": "https://cdn.example.com/umamusume-icon.png",
        "dailyTasks": [
            {"id": "daily_race", "name": "デイリーレース", "description": "デイリーレースに3回出走する",
             "priority": "medium", "resetTime": "05:00", "category": "combat"},
            {"id": "circle_competition", "name": "サークル競技場", "description": "サークル競技場に参加する",
             "priority": "low", "resetTime": "12:00", "category": "competition"},
            {"id": "training", "name": "育成", "description": "ウマ娘の育成を進める",
             "priority": "high", "category": "training"},
        ],
    },
    {
        "id": "granblue",
        "name": "グランブルーファンタジー",
        "platform": "multi",
        "iconUrl": "https://cdn.example.com/granblue-icon.png",
        "dailyTasks": [
            {"id": "daily_mission", "name": "デイリーミッション", "description": "デイリーミッションをクリアする",
             "priority": "high", "resetTime": "05:00", "category": "mission"},
            {"id": "casino_poker", "name": "カジノポーカー", "description": "カジノでポーカーをプレイする",
             "priority": "low", "category": "minigame"},
            {"id": "arcarum", "name": "アーカルム", "description": "アーカルムの転世を進める",
             "priority": "medium", "category": "exploration"},
        ],
    },
    {
        "id": "puzzdra",
        "name": "パズル&ドラゴンズ",
        "platform": "mobile",
        "iconUrl": "https://cdn.example.com/puzzdra-icon.png",
        "dailyTasks": [
            {"id": "login_bonus", "name": "ログインボーナス", "description": "毎日のログインボーナスを受け取る",
             "priority": "medium", "resetTime": "04:00", "category": "login"},
            {"id": "daily_dungeon", "name": "デイリーダンジョン", "description": "デイリーダンジョンをクリアする",
             "priority": "high", "category": "combat"},
            {"id": "stamina_consumption", "name": "スタミナ消化", "description": "スタミナを効率的に消化する",
             "priority": "medium", "category": "resource"},
        ],
    },
]


def seed_game_masters(db: Session) -> int:
    """Insert catalog games that are not in the table yet; returns how many were added."""
    existing = {gid for (gid,) in db.query(GameMaster.id).all()}
    added = 0
    now = utcnow()
    for entry in GAME_CATALOG:
        if entry["id"] in existing:
            continue
        db.add(GameMaster(
            id=entry["id"],
            name=entry["name"],
            platform=entry["platform"],
            daily_tasks=entry["dailyTasks"],
            icon_url=entry["iconUrl"],
            created_at=now,
            updated_at=now,
        ))
        added += 1
        logger.info("Added game %s", entry["name"])
    db.commit()
    if added:
        logger.info("Game catalog seeded (%d new)", added)
    return added
