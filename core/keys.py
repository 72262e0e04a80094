# -*- coding: utf-8 -*-
"""Single source of truth for product record keys.

These are the field names used by the backend API and by the editor forms.
Keep them stable; screens and controllers must not spell them inline.
"""

from __future__ import annotations


class ProductKeys:
    # identity
    ID = "id"

    # basic info
    NAME = "productName"
    SHORT_DESCRIPTION = "shortDescription"
    DESCRIPTION = "description"
    SKU = "sku"
    BARCODE = "barcode"
    MODEL = "model"
    SLUG = "slug"
    MATERIAL = "material"
    WARRANTY = "warrantyInfo"
    CARE_INSTRUCTIONS = "careInstructions"
    CATEGORY_ID = "categoryId"
    BRAND_ID = "brandId"
    ACTIVE = "active"
    FEATURED = "featured"
    BESTSELLER = "bestseller"
    NEW_ARRIVAL = "newArrival"
    ON_SALE = "onSale"
    SALE_PERCENTAGE = "salePercentage"

    # pricing
    PRICE = "price"
    COMPARE_AT_PRICE = "compareAtPrice"
    COST_PRICE = "costPrice"

    # media
    IMAGES = "images"
    VIDEOS = "videos"

    # variants
    VARIANTS = "variants"

    # inventory
    WAREHOUSE_STOCKS = "warehouseStocks"

    # details / SEO
    META_TITLE = "metaTitle"
    META_DESCRIPTION = "metaDescription"
    META_KEYWORDS = "metaKeywords"
    SEARCH_KEYWORDS = "searchKeywords"
    DIMENSIONS_CM = "dimensionsCm"
    WEIGHT_KG = "weightKg"


class MediaKeys:
    ID = "id"
    URL = "url"
    IS_PRIMARY = "isPrimary"
    SORT_ORDER = "sortOrder"
    # local-only (never sent, never compared except LOCAL_PATH for pending items)
    LOCAL_KEY = "localKey"
    LOCAL_PATH = "localPath"
    ERROR = "error"


class VariantKeys:
    ID = "id"
    SKU = "variantSku"
    PRICE = "price"
    COMPARE_AT_PRICE = "compareAtPrice"
    COST_PRICE = "costPrice"
    IS_ACTIVE = "isActive"
    ATTRIBUTES = "attributes"
    IMAGES = "images"


class StockKeys:
    QUANTITY = "quantity"
    LOW_STOCK_THRESHOLD = "lowStockThreshold"
    BATCHES = "batches"
