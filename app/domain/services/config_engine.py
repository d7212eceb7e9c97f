"""
CONFIG ENGINE
Load, validate, and expose YAML configuration

RESPONSIBILITIES:
- Load the sample portfolio (portfolio.yml, required)
- Load application settings (app.yml, optional)
- Expose read-only typed objects

RULES:
✅ Fail fast on an invalid portfolio
✅ Deterministic output
"""

import yaml
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.domain.models.portfolio import Holding


DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"

_HOLDING_KEYS = ("symbol", "name", "purchase_price", "quantity", "exchange", "sector")


class ConfigEngine:
    """
    Configuration Engine
    Single source of truth for file-based configuration
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize with config directory"""
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self._holdings: List[Holding] = []
        self._app_config: Dict[str, Any] = {}

    def load_all(self) -> None:
        """Load all configuration files"""
        self._load_portfolio()
        self._load_app_config()

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data or {}

    def _load_portfolio(self) -> None:
        """Load holdings from portfolio.yml"""
        portfolio_file = self.config_dir / "portfolio.yml"
        if not portfolio_file.exists():
            raise FileNotFoundError(f"Portfolio config not found: {portfolio_file}")

        data = self._read_yaml(portfolio_file)
        holdings = []
        for index, row in enumerate(data.get("holdings", [])):
            missing = [key for key in _HOLDING_KEYS if key not in row]
            if missing:
                raise ValueError(f"Holding #{index} missing fields: {', '.join(missing)}")
            holdings.append(
                Holding(
                    symbol=str(row["symbol"]).strip(),
                    name=row["name"],
                    purchase_price=Decimal(str(row["purchase_price"])),
                    quantity=row["quantity"],
                    exchange=row["exchange"],
                    sector=row["sector"],
                )
            )

        symbols = [h.symbol for h in holdings]
        if len(symbols) != len(set(symbols)):
            raise ValueError("Duplicate holding symbols found in configuration")

        self._holdings = holdings

    def _load_app_config(self) -> None:
        """Load application settings from app.yml (defaults apply when absent)"""
        app_file = self.config_dir / "app.yml"
        self._app_config = self._read_yaml(app_file) if app_file.exists() else {}

    @property
    def holdings(self) -> List[Holding]:
        return list(self._holdings)

    def get_app_setting(self, section: str, key: Optional[str] = None) -> Any:
        """Get one section of app.yml, or one key inside it"""
        values = self._app_config.get(section) or {}
        if key is None:
            return values
        return values.get(key)
