#!/usr/bin/env python3
"""Скрипт для запуска SCIM Directory Service"""

import sys
import subprocess
import argparse


def run_server():
    """Запуск сервера разработки"""
    print("🚀 Запуск SCIM Directory Service...")
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "scim_directory.main:create_app",
            "--factory",
            "--host", "0.0.0.0",
            "--port", "8000",
            "--reload"
        ], check=True)
    except KeyboardInterrupt:
        print("\n✋ Сервер остановлен")
    except subprocess.CalledProcessError as e:
        print(f"❌ Ошибка запуска сервера: {e}")
        sys.exit(1)


def run_tests():
    """Запуск тестов"""
    print("🧪 Запуск тестов...")
    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "tests/",
        "-v",
        "--tb=short"
    ], check=False)
    if result.returncode == 0:
        print("✅ Все тесты прошли успешно!")
    else:
        print("❌ Некоторые тесты не прошли")
        sys.exit(1)


def lint_code():
    """Проверка кода линтерами"""
    print("🔍 Проверка кода...")

    print("  Проверка форматирования с Black...")
    black = subprocess.run([
        sys.executable, "-m", "black",
        "scim_directory/", "tests/", "--check"
    ])
    if black.returncode == 0:
        print("  ✅ Black: код отформатирован правильно")
    else:
        print("  ⚠️  Black: требуется форматирование")

    print("  Проверка с Flake8...")
    flake8 = subprocess.run([
        sys.executable, "-m", "flake8",
        "scim_directory/", "tests/"
    ])
    if flake8.returncode == 0:
        print("  ✅ Flake8: проблем не найдено")
    else:
        print("  ❌ Flake8: найдены проблемы")

    if black.returncode or flake8.returncode:
        sys.exit(1)


def main():
    """Главная функция"""
    parser = argparse.ArgumentParser(description="SCIM Directory Service управление")
    parser.add_argument(
        "command",
        choices=["server", "test", "lint"],
        help="Команда для выполнения"
    )

    args = parser.parse_args()

    if args.command == "server":
        run_server()
    elif args.command == "test":
        run_tests()
    elif args.command == "lint":
        lint_code()


if __name__ == "__main__":
    main()
