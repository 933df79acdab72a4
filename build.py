import os
import subprocess
import sys
from PIL import Image

APP_NAME = "MilkBook"
ENTRY_POINT = "milkbook.py"


def prepare_icon(icon_png="resources/icon.png", icon_ico="resources/icon.ico"):
    """Convert the PNG app icon to ICO, returning the ICO path or None."""
    if not os.path.exists(icon_png):
        print("Warning: icon.png not found in resources/")
        return None
    try:
        img = Image.open(icon_png)
        img.save(icon_ico, format='ICO', sizes=[(256, 256)])
    except OSError as e:
        print(f"Warning: Could not convert icon: {e}")
        return None
    print(f"Converted {icon_png} to {icon_ico}")
    return icon_ico


def nuitka_command(icon_ico=None):
    cmd = [
        sys.executable, "-m", "nuitka",
        "--standalone",
        "--enable-plugin=pyqt6",
        "--windows-console-mode=disable",
        "--lto=yes",
        "--deployment",
        "--show-progress",
        "--output-dir=build",
        f"--output-filename={APP_NAME}",
        # reportlab loads its bundled fonts from package data
        "--include-package-data=reportlab",
    ]
    if os.path.isdir("resources"):
        cmd.append("--include-data-dir=resources=resources")
    if icon_ico and os.path.exists(icon_ico):
        cmd.append(f"--windows-icon-from-ico={icon_ico}")
    cmd.append(ENTRY_POINT)
    return cmd


def build():
    print(f"Initializing {APP_NAME} Build Sequence (Target: Windows)...")

    print("Preparing Icon...")
    cmd = nuitka_command(prepare_icon())

    print("\nExecuting Nuitka Build Command:")
    print(" ".join(cmd))
    print("\nThis process may take several minutes...")

    try:
        if os.name == 'nt':
            subprocess.check_call(cmd)
            print("\nBUILD SUCCESSFUL!")
            print(f"Artifacts located in: {os.path.abspath('build/milkbook.dist')}")
        else:
            print("\n[INFO] You are running on Linux.")
            print("To build for Windows, please transfer this project to a Windows machine")
            print("and run: python build.py")
            print("(Ensure 'pip install .[build]' is run first)")
    except subprocess.CalledProcessError as e:
        print(f"\nBUILD FAILED with Code {e.returncode}")
        sys.exit(1)


if __name__ == "__main__":
    build()
