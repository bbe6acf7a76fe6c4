import os
import logging
from datetime import datetime
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Default audit location: <project root>/reports
current_directory = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
report_directory = os.path.join(current_directory, 'reports')


class CalculationAudit:
    """
    Session-wide audit trail of every emission formula evaluated.
    Disabled until `enable()` is called; nothing touches the filesystem before that.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(CalculationAudit, cls).__new__(cls)
            cls._instance.initialized = False
        return cls._instance

    def __init__(self):
        if self.initialized:
            return

        self.enabled = False
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_dir = report_directory
        self.log_file: Optional[str] = None
        self.initialized = True

    def enable(self, log_dir: Optional[str] = None) -> str:
        """
        Start writing to `<log_dir>/audit_<session>.txt` and return that path.
        """
        if log_dir:
            self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)
        self.log_file = os.path.join(self.log_dir, f"audit_{self.session_id}.txt")

        with open(self.log_file, "w", encoding="utf-8") as f:
            f.write("=== EMISSION CALCULATION AUDIT LOG ===\n")
            f.write(f"Session: {self.session_id}\n")
            f.write("======================================\n\n")

        self.enabled = True
        logger.debug(f"Audit log enabled at {self.log_file}")
        return self.log_file

    def disable(self) -> None:
        self.enabled = False

    def log_calculation(self, context: str, formula: str, variables: Dict[str, Any], result: float, unit: str = "kgCO2e"):
        """
        Log a calculation step to the audit file.

        Args:
            context: Description of what is being calculated (e.g., "Energy: Electricity")
            formula: Text representation of equation (e.g., "Usage * EF * 12 * (1 - Renewable/100)")
            variables: Dict of actual values used (e.g., {"Usage_kWh": 500, "EF": 0.5})
            result: The final result
            unit: Unit of the result
        """
        if not self.enabled or not self.log_file:
            return

        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"[{datetime.now().strftime('%H:%M:%S')}] {context}\n")
                f.write(f"  Formula: {formula}\n")

                vars_str = ", ".join([f"{k}={v}" for k, v in variables.items()])
                f.write(f"  Inputs:  {vars_str}\n")

                f.write(f"  Result:  {result:.4f} {unit}\n")
                f.write("-" * 40 + "\n")
        except OSError as e:
            logger.error(f"Failed to write to audit log: {e}")


# Global Accessor
audit_logger = CalculationAudit()
