"""宣坨坨 - 山西吕梁柳林传统扑克规则引擎"""

__version__ = "0.1.0"
