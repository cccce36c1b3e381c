from .figma_design import FIGMA_DESIGN_RULES
from .code_review import CODE_REVIEW_RULES
from .ui_test import UI_TEST_RULES
