#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mooded - трекер настроения и привычек

Хранилища записей настроения и привычек, расписание напоминаний,
аналитика истории и экспорт в CSV.
"""

__version__ = "1.2.0"
