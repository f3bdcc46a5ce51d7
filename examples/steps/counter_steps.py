from __future__ import annotations


def register(steps):
    @steps.step("the counter is {number}")
    def counter_is(ctx, value):
        # en Background: initialise; ensuite: vérifie
        if "counter" not in ctx.variables:
            ctx.variables["counter"] = value
        assert ctx.variables["counter"] == value, f"counter={ctx.variables['counter']}, expected {value}"

    @steps.step("I add {number}")
    def add(ctx, value):
        ctx.variables["counter"] += value

    @steps.step("the name is {string}")
    def name_is(ctx, name):
        ctx.variables["name"] = name

    @steps.step("the greeting is {string}")
    def greeting_is(ctx, expected):
        assert f"Hello, {ctx.variables['name']}" == expected
