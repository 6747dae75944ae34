"""Built-in Git training modules, in the order they are presented."""

from .models import Catalog, Difficulty, Exercise, Module, Step


GIT_BASICS = Module(
    id="git-basics",
    title="Git Basics",
    description="Learn the fundamental concepts and commands in Git",
    difficulty=Difficulty.BEGINNER,
    estimated_time="30 minutes",
    content="""
# Introduction to Git

Git is a distributed version control system that tracks changes in your code.
This module covers the basic commands and workflows.

## Key Concepts

1. **Repository**: a container for your project that tracks all changes
2. **Commit**: a snapshot of your changes at a point in time
3. **Branch**: a separate line of development
4. **Remote**: a repository hosted on a server

## Basic Commands

- `git init`: initialize a new repository
- `git add`: stage changes for commit
- `git commit`: save staged changes
- `git status`: check repository status
- `git log`: view commit history
""",
    exercises=(
        Exercise(
            id="init-repo",
            question="Initialize a Git Repository",
            description=(
                "Follow the steps to create a new directory and initialize it "
                "as a Git repository."
            ),
            hints=(
                'Use the exact directory name "my-project"',
                "Use the proper Git command to initialize a repository",
            ),
            solution="mkdir my-project && cd my-project && git init",
            steps=(
                Step('Create a directory named "my-project"', "mkdir my-project"),
                Step('Navigate into the "my-project" directory', "cd my-project"),
                Step("Initialize the directory as a Git repository", "git init"),
            ),
        ),
        Exercise(
            id="first-commit",
            question="Make Your First Commit",
            description="Create a file, stage it, and commit it to the repository.",
            hints=(
                'Use echo "# My Project" > README.md to create the file',
                "Use git add README.md to stage the file",
                'Use git commit -m "Initial commit" for your commit message',
            ),
            solution=(
                'echo "# My Project" > README.md && git add README.md '
                '&& git commit -m "Initial commit"'
            ),
            steps=(
                Step(
                    'Create a README.md file with the content "# My Project"',
                    'echo "# My Project" > README.md',
                ),
                Step("Stage the README.md file", "git add README.md"),
                Step(
                    'Commit the changes with the message "Initial commit"',
                    'git commit -m "Initial commit"',
                ),
            ),
        ),
    ),
)


BRANCHING_BASICS = Module(
    id="branching-basics",
    title="Branching and Merging",
    description="Learn how to work with branches and merge code changes",
    difficulty=Difficulty.BEGINNER,
    estimated_time="45 minutes",
    prerequisites=("git-basics",),
    content="""
# Branching and Merging in Git

Branches let you develop features, fix bugs and experiment in isolation.

## Key Concepts

1. **Branch**: an independent line of development
2. **Merge**: combining changes from different branches
3. **Conflict**: changes in different branches touching the same code
4. **Pull Request**: a request to merge one branch into another

## Common Commands

- `git branch`: list, create, or delete branches
- `git checkout`: switch between branches
- `git merge`: merge changes from one branch into another
- `git pull`: fetch and merge changes from a remote
""",
    exercises=(
        Exercise(
            id="create-branch",
            question="Create and Switch to a New Branch",
            description='Create a new branch called "feature" and switch to it.',
            hints=(
                "Use git branch to create a new branch",
                "Use git checkout to switch to the branch",
                "Or use git checkout -b to do both at once",
            ),
            solution="git checkout -b feature",
        ),
    ),
)


ADVANCED_MERGING = Module(
    id="advanced-merging",
    title="Advanced Merging Strategies",
    description="Learn advanced merging techniques and how to resolve conflicts",
    difficulty=Difficulty.INTERMEDIATE,
    estimated_time="60 minutes",
    prerequisites=("branching-basics",),
    content="""
# Advanced Merging in Git

Different merging strategies and how to handle conflicting changes.

## Merging Strategies

1. **Fast-forward merge**: no new changes in the target branch
2. **Recursive merge**: both branches have new changes
3. **Squash merge**: all changes combined into a single commit
4. **Rebase**: commits replayed on top of another branch

## Handling Merge Conflicts

1. Identify conflicting files
2. Choose which changes to keep
3. Mark conflicts as resolved
4. Complete the merge
""",
    exercises=(
        Exercise(
            id="resolve-conflict",
            question="Resolve a Merge Conflict",
            description=(
                "Resolve the conflict in the README.md file and complete the merge."
            ),
            hints=(
                "Open the conflicting file",
                "Look for conflict markers (<<<<<<<, =======, >>>>>>>)",
                "Remove the markers, keeping the changes you want",
                "Stage and commit the resolved file",
            ),
            solution='git add README.md && git commit -m "Resolve merge conflict"',
        ),
    ),
)


GIT_FLOW = Module(
    id="git-flow",
    title="Git Flow & Advanced Workflows",
    description="Learn advanced Git workflows and the Git Flow branching model",
    difficulty=Difficulty.ADVANCED,
    estimated_time="90 minutes",
    prerequisites=("branching-basics", "advanced-merging"),
    content="""
# Git Flow and Advanced Workflows

Git Flow is a branching model for managing larger projects.

## Branch Types

1. **main**: production-ready code
2. **develop**: main development branch
3. **feature/\\***: new features
4. **release/\\***: release preparation
5. **hotfix/\\***: production bug fixes

## Release Process

1. Create a release branch from develop
2. Stabilize and test
3. Merge to main and develop
4. Tag the release
""",
    exercises=(
        Exercise(
            id="create-feature",
            question="Create a Feature Branch",
            description=(
                "Create a new feature branch from develop and make your first commit."
            ),
            hints=(
                "Check out the develop branch first",
                "Create a new branch with a descriptive name",
                "Commit your changes",
            ),
            solution=(
                "git checkout develop && git checkout -b feature/user-profile "
                '&& git commit -m "Start user profile feature"'
            ),
        ),
        Exercise(
            id="prepare-release",
            question="Prepare a Release",
            description="Create a release branch and update the version number.",
            hints=(
                "Create a release branch named after the version",
                "Update the version in package.json",
                "Commit the changes",
            ),
            solution=(
                "git checkout -b release/1.0.0 "
                """&& echo '{"version": "1.0.0"}' > package.json """
                '&& git add package.json && git commit -m "Bump version to 1.0.0"'
            ),
        ),
    ),
)


TRAINING_CATALOG = Catalog(
    modules=[GIT_BASICS, BRANCHING_BASICS, ADVANCED_MERGING, GIT_FLOW]
)
