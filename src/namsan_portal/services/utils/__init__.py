from namsan_portal.services.utils.news_parser import (JsonArrayExtraction,
                                                     StockNewsExtraction,
                                                     StockNewsItem,
                                                     extract_json_array,
                                                     parse_stock_news)

__all__ = [
    "JsonArrayExtraction",
    "StockNewsExtraction",
    "StockNewsItem",
    "extract_json_array",
    "parse_stock_news",
]
