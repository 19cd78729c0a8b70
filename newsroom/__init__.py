"""Newsroom: bilingual (English/Bengali) publishing backend."""
