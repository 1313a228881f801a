"""SCIM Directory Service: SCIM 2.0 пользователи и группы поверх реляционной базы данных"""
