from setuptools import setup

setup(
    name="java-playground-kit",
    version="0.1.0",
    description="Create and upgrade Java/Gradle/Cucumber playground projects from templates.",
    package_dir={"": "src"},
    packages=["playground_templates"],
    py_modules=["playground_create", "playground_infer", "playground_upgrade"],
    package_data={"playground_templates": ["templates/*.template"]},
    install_requires=["requests>=2.31"],
    extras_require={"test": ["pytest>=8", "approvaltests>=14"]},
    entry_points={
        "console_scripts": [
            "playground-create=playground_create:main",
            "playground-upgrade=playground_upgrade:main",
        ]
    },
    python_requires=">=3.10",
)
