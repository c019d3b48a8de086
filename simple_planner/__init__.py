import logging
import sys

__version__ = "1.0.0"
__author__ = "Simple Planner Team"
__description__ = "Occupancy grid global path planner"

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

logger = logging.getLogger(__name__)
logger.debug(f"simple_planner v{__version__} package loaded")

__all__ = ['__version__', '__author__', '__description__']
