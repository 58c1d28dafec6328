import uuid
from datetime import date as date_type
from sqlalchemy import String, Boolean, Integer, Date, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from athletics.database import Base


class Game(Base):
    __tablename__ = "games"

    __table_args__ = (
        Index("ix_games_date", "date"),
        Index("ix_games_sport_date", "sport", "date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    sport: Mapped[str] = mapped_column(String(50))  # Football, Volleyball, Boys Hockey, etc.
    opponent: Mapped[str] = mapped_column(String(200))
    date: Mapped[date_type] = mapped_column(Date)
    time: Mapped[str] = mapped_column(String(50))  # Free text from the schedule sheet, e.g. "7:00 PM"
    location: Mapped[str] = mapped_column(Text)
    is_home: Mapped[bool] = mapped_column(Boolean, default=True)

    # Final score (null until the game is played)
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    final: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<Game {self.sport} vs {self.opponent} on {self.date}>"
